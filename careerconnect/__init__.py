"""
CareerConnect
A job board: postings, applications, profiles and direct messages.

Architecture:
- FastAPI routes -> service classes -> MongoDB collections
- Stateless JWT bearer auth with role gates
- careerconnect.client: Python API client and state stores
"""

__version__ = "1.0.0"
