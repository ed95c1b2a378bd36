"""Recursive directory watching with batched, merged file events."""