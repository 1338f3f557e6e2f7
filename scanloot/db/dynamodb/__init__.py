"""Shared DynamoDB utilities.

This package centralizes:
- boto3 client/resource configuration (including DynamoDB Local)
- retry/backoff policy
- typed, expressive errors for consistent HTTP problem responses
- transactional helpers

"""
