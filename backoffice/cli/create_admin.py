# backoffice/cli/create_admin.py
"""Bootstrap the first admin, who can then provision the others over HTTP."""
import asyncio
import click
from pydantic import ValidationError as SchemaValidationError

from backoffice.core.exceptions import BaseServiceError
from backoffice.database import get_session
from backoffice.schemas.admin import AdminCreate
from backoffice.services.admin_service import AdminService


@click.command()
@click.option('--email', required=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--admin-code', required=True, help='Short operator code, e.g. A01')
@click.option('--name', required=True)
@click.option('--phone', default=None)
def create_admin(email, password, admin_code, name, phone):
    """Create a login identity with the admin role and its admin record"""
    try:
        data = AdminCreate(email=email, password=password, admin_code=admin_code, name=name, phone=phone)
    except SchemaValidationError as e:
        raise click.BadParameter(str(e))

    async def _create():
        async with get_session() as session:
            user, admin = await AdminService(session).create_admin(data)
            click.echo(f"Created admin {admin.admin_code} ({admin.email}), user id {user.id}")

    try:
        asyncio.run(_create())
    except BaseServiceError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    create_admin()
