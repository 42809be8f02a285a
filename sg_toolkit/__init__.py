"""Security group naming and ingress reconciliation toolkit."""
