"""Filesystem, command, batching and background-thread helpers."""