"""
Serving — FastAPI application for context retrieval and the archive guide.
"""
