"""Master and per-tenant database access: engines, models, repositories, tenant provisioning."""
