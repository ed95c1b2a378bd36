"""Commit and pull request results, their validation, and transaction errors."""