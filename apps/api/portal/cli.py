"""CLI tools for portal administration."""

import click

from portal.core.config import settings
from portal.core.permissions import PermissionKey, get_role_default_permissions
from portal.core.role_rules import (
    normalize_legacy_role,
    role_display_name,
    role_to_storage_value,
)
from portal.core.security import create_session_token
from portal.core.status_engine import (
    broker_label,
    can_transition,
    can_transition_broker,
    get_valid_broker_transitions,
    get_valid_transitions,
    is_valid_broker_status,
    is_valid_status,
    label,
)
from portal.core.status_normalization import (
    LegacyStatusError,
    coerce_broker_status,
    coerce_quote_status,
)
from portal.db.enums import BrokerStatus, QuoteStatus, Role, UserType


@click.group()
def cli():
    """Client Connect portal CLI tools."""
    pass


@cli.command()
def role_matrix():
    """
    Print the role x permission grant table.

    Example:
        python -m portal.cli role-matrix
    """
    roles = list(Role)
    width = max(len(p.value) for p in PermissionKey)
    header = "permission".ljust(width) + "  " + "  ".join(r.value for r in roles)
    click.echo(header)
    click.echo("-" * len(header))
    for permission in PermissionKey:
        cells = []
        for role in roles:
            mark = "x" if permission in get_role_default_permissions(role) else "."
            cells.append(mark.center(len(role.value)))
        click.echo(permission.value.ljust(width) + "  " + "  ".join(cells))


@cli.command()
@click.argument("status")
@click.option("--broker", is_flag=True, help="Use the broker status track")
def transitions(status: str, broker: bool):
    """
    List the statuses reachable from STATUS in one step.

    Example:
        python -m portal.cli transitions quoted
    """
    valid = is_valid_broker_status(status) if broker else is_valid_status(status)
    if not valid:
        click.echo(f"❌ Unknown {'broker status' if broker else 'status'}: {status}")
        raise click.exceptions.Exit(1)

    if broker:
        allowed = get_valid_broker_transitions(status)
        ordered = [s for s in BrokerStatus if s in allowed]
        render = broker_label
    else:
        allowed = get_valid_transitions(status)
        ordered = [s for s in QuoteStatus if s in allowed]
        render = label

    if not ordered:
        click.echo(f"{status} is terminal")
        return
    for target in ordered:
        click.echo(f"{target.value}\t{render(target)}")


@cli.command()
@click.argument("current")
@click.argument("target")
@click.option("--broker", is_flag=True, help="Use the broker status track")
def check_transition(current: str, target: str, broker: bool):
    """
    Check whether CURRENT -> TARGET is allowed. Exits 1 when it is not.

    Example:
        python -m portal.cli check-transition pending delivered
    """
    allowed = can_transition_broker(current, target) if broker else can_transition(current, target)
    if allowed:
        click.echo(f"✓ {current} -> {target} is allowed")
        return
    click.echo(f"❌ {current} -> {target} is not allowed")
    raise click.exceptions.Exit(1)


@cli.command()
@click.argument("value")
@click.option("--broker", is_flag=True, help="Coerce to a broker status")
def normalize_status(value: str, broker: bool):
    """
    Convert a stored legacy status (e.g. "Quote", "In Progress") to its canonical value.

    Example:
        python -m portal.cli normalize-status "Quote"
    """
    try:
        status = coerce_broker_status(value) if broker else coerce_quote_status(value)
    except LegacyStatusError as e:
        click.echo(f"❌ {e}")
        raise click.exceptions.Exit(1)
    click.echo(status.value)


@cli.command()
@click.argument("value")
def normalize_role(value: str):
    """
    Map a stored role string (e.g. "broker", "Administrator") to its role.

    Prints the role, its display name and the value written back to storage.

    Example:
        python -m portal.cli normalize-role broker
    """
    role = normalize_legacy_role(value)
    if role is None:
        click.echo(f"❌ Unknown role: {value}")
        raise click.exceptions.Exit(1)
    click.echo(f"{role.value}\t{role_display_name(role)}\tstored as {role_to_storage_value(role)}")


@cli.command()
@click.option("--user-id", required=True, help="Principal id (sub claim)")
@click.option(
    "--user-type",
    type=click.Choice([t.value for t in UserType]),
    default=UserType.NTS_USER.value,
    show_default=True,
)
def issue_token(user_id: str, user_type: str):
    """
    Print a signed session token for local testing.

    The token names the user only; role and companies come from the
    principal directory when the token is used.

    Example:
        python -m portal.cli issue-token --user-id u1
    """
    click.echo(f"# expires in {settings.JWT_EXPIRES_HOURS}h", err=True)
    click.echo(create_session_token(user_id, UserType(user_type)))


if __name__ == "__main__":
    cli()
