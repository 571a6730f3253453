"""
Core building blocks shared by the workflow, billing and server packages:
logging, monitoring, persistence and the domain/IO models.
"""
