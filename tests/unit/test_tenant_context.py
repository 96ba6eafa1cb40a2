"""run_with_tenant_context for queue consumers and jobs."""

import pytest

from app.core.tenant_context import (
    TenantContext,
    get_tenant_context,
    get_tenant_context_or_none,
    run_with_tenant_context,
)
from app.domain.exceptions import TenantNotFoundException
from tests.factories import make_tenant


async def _current_slug(ctx: TenantContext) -> tuple[str, str]:
    return ctx.slug, get_tenant_context().database_name


async def test_runs_inside_the_tenant_context(fake_manager) -> None:
    result = await run_with_tenant_context("acme", _current_slug, request_id="evt-1")

    assert result == ("acme", "oms_tenant_acme")
    assert get_tenant_context_or_none() is None


async def test_falls_back_to_tenant_id(fake_manager) -> None:
    fake_manager.tenants["globex"] = make_tenant(
        id="tenant-3", slug="globex", database_name="oms_tenant_globex"
    )

    result = await run_with_tenant_context("tenant-3", _current_slug)

    assert result == ("globex", "oms_tenant_globex")


async def test_unknown_tenant(fake_manager) -> None:
    with pytest.raises(TenantNotFoundException):
        await run_with_tenant_context("nobody", _current_slug)


async def test_context_is_reset_when_fn_fails(fake_manager) -> None:
    async def boom(ctx: TenantContext) -> None:
        raise RuntimeError("handler failed")

    with pytest.raises(RuntimeError):
        await run_with_tenant_context("acme", boom)

    assert get_tenant_context_or_none() is None
