from switchrole.app import create_app, db
import json

from flask_migrate import Migrate
from flask.cli import FlaskGroup
import click
from flask import current_app
from switchrole.models import User
from switchrole.services import privacy


migrate = Migrate()


def create_switchrole_app():
    app = create_app()
    migrate.init_app(app, db)
    return app


cli = FlaskGroup(create_app=create_switchrole_app)


@cli.command("prefs_export")
@click.option("--user", "user_id", required=True, type=int)
def prefs_export(user_id: int):
    """Print the stored last-role preferences of a user as JSON."""
    if not db.session.get(User, user_id):
        click.echo("Not found", err=True)
        return
    course_ids = privacy.get_courses_for_user(user_id)
    click.echo(json.dumps(privacy.export_user_data(user_id, course_ids), indent=2))


@cli.command("prefs_purge")
@click.option("--course", "course_id", required=True, type=int)
@click.option(
    "--user",
    "user_ids",
    multiple=True,
    type=int,
    help="Limit the purge to these users; repeatable",
)
@click.option("--dry-run", is_flag=True, help="List affected users without deleting")
def prefs_purge(course_id: int, user_ids: tuple[int, ...], dry_run: bool):
    affected = privacy.get_users_in_course(course_id)
    if user_ids:
        affected = [uid for uid in affected if uid in user_ids]
    for uid in affected:
        click.echo(f"user_id={uid}")
    if dry_run:
        click.echo(f"would_delete={len(affected)}")
        return
    if user_ids:
        deleted = privacy.delete_data_for_users(course_id, user_ids)
    else:
        deleted = privacy.delete_data_for_all_users_in_course(course_id)
    summary = f"course={course_id} deleted={deleted}"
    click.echo(summary)
    current_app.logger.info("[PREF-PURGE] %s", summary)


if __name__ == "__main__":
    cli()
