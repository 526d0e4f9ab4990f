# cemse -- FastAPI discovery & search API for the CEMSE platform
#
# Modules:
#   app        -- FastAPI application with lifespan management
#   config     -- environment configuration (.env) and logging setup
#   database   -- PostgreSQL / SQLite async engine and read gateway
#   models     -- SQLAlchemy ORM models (users, companies, jobs, courses, startups)
#   schemas    -- Pydantic filter / result models
#   auth       -- forwarded identity + capability-based authorization
#   errors     -- error types and {"error": ...} exception handlers
#   assets     -- certificate logos loaded once per process
#   services/  -- filter normalizer, query builder, ranking, shaping, search, discovery
#   routes/    -- API endpoints (search, startups, certificates)
