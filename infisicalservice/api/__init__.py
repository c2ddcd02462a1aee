"""HTTP interface: FastAPI application, middleware and routers."""
