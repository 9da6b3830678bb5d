"""
dashboard_api – FastAPI service serving the building operations dashboard.
"""
