"""Shared state for CLI commands."""

import click

from trucking_billing.engine import BillingEngine


def get_engine(ctx: click.Context) -> BillingEngine:
    """Return the command's billing engine, loading the record file once.

    An engine placed in ``ctx.obj["engine"]`` beforehand is used as-is.
    """
    obj = ctx.ensure_object(dict)
    if obj.get("engine") is None:
        obj["engine"] = BillingEngine.from_data_file(obj.get("data_file"))
    return obj["engine"]


def is_debug(ctx: click.Context) -> bool:
    return bool(ctx.ensure_object(dict).get("debug"))
