"""AWS SDK adapters (boto3/botocore).

Service registry, client construction, transport options and error mapping.
"""
