"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, configurable work factor)
  • JWT token issuance & verification
  • Register / Login / Verify API routes
  • ``get_current_user`` FastAPI dependency (the auth gate)
"""
