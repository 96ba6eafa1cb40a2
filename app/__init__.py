"""Office management platform: multi-tenant HR, attendance, leave, holidays and billing."""
