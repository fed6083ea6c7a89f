"""
API server package: HTTP interface over the risk worker.

Exposes single and batch scoring and neighbor graphs; every request is
serialized through the app's RiskWorker.
"""
