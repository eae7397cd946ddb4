# backend -- FastAPI server around one PreferenceEngine
#
# Modules:
#   app          -- FastAPI application factory with lifespan-owned engine
#   dependencies -- request-scoped engine access
#   schemas      -- Pydantic request/response schemas
#   routes/      -- API endpoints (feedback, score, admin)
