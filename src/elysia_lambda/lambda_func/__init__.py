"""
Lambda function create/update reconciliation.
"""
