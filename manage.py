#!/usr/bin/env python3
"""
Props With Pals Management CLI

This script provides command-line management functionality for the Props With Pals application.
"""

import os

import click
from flask.cli import with_appcontext
from flask_migrate import migrate, upgrade
from sqlalchemy import text

from propspals import create_app, db
from propspals.errors import PoolNotFound
from propspals.models import Participant, Pool, Prop
from propspals.services import auth_service, resolution_service


@click.group()
def cli():
    """Props With Pals Management CLI"""
    pass


# Pool Commands
@cli.group()
def pool():
    """Pool inspection and maintenance commands"""
    pass


@pool.command("list")
@click.option("--status", help="Only show pools in this status")
@with_appcontext
def list_pools(status):
    """List pools, newest first"""
    query = Pool.query.order_by(Pool.created_at.desc())
    if status:
        query = query.filter_by(status=status)

    pools = query.all()
    if not pools:
        click.echo("No pools found")
        return

    for p in pools:
        players = len(p.get_active_participants())
        click.echo(
            f"{p.invite_code:<24} {p.status:<10} {players:>3} players  {p.name}"
        )


@pool.command("show")
@click.argument("code")
@with_appcontext
def show_pool(code):
    """Show a pool's props and standings"""
    try:
        p = auth_service.get_pool_by_code(code)
    except PoolNotFound:
        click.echo(f"❌ Pool {code} not found")
        return

    click.echo(f"🏆 {p.name} ({p.invite_code})")
    click.echo("=" * 40)
    click.echo(f"Status:  {p.status}")
    click.echo(f"Captain: {p.captain_name}")

    click.echo("\nProps:")
    for prop in p.get_props():
        if prop.is_voided:
            answer = "voided"
        elif prop.is_resolved:
            answer = prop.options[prop.correct_option_index]
        else:
            answer = "unresolved"
        click.echo(f"  [{prop.point_value:>4} pts] {prop.question_text} -> {answer}")

    click.echo("\nStandings:")
    players = sorted(
        p.get_active_participants(), key=lambda pl: (-pl.total_points, pl.name)
    )
    for rank, player in enumerate(players, start=1):
        click.echo(f"  {rank:>2}. {player.name:<30} {player.total_points}")


@pool.command("rescore")
@click.argument("code")
@with_appcontext
def rescore(code):
    """Recompute every pick and total in a pool from its answers"""
    try:
        p = auth_service.get_pool_by_code(code)
    except PoolNotFound:
        click.echo(f"❌ Pool {code} not found")
        return

    try:
        totals = resolution_service.rescore_pool(p)
    except Exception as e:
        click.echo(f"❌ Error rescoring pool: {str(e)}")
        return

    click.echo(f"✅ Rescored {len(totals)} participants in {p.invite_code}")


# Recovery Token Commands
@cli.group()
def tokens():
    """Recovery token commands"""
    pass


@tokens.command("purge")
@with_appcontext
def purge_tokens():
    """Delete used and expired recovery tokens"""
    removed = auth_service.purge_expired_tokens()
    click.echo(f"✅ Removed {removed} recovery tokens")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except Exception as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except Exception as e:
        click.echo(f"❌ Error resetting database: {str(e)}")


# Database Migration Commands
@cli.group()
def db_migrate():
    """Database migration commands"""
    pass


@db_migrate.command()
@with_appcontext
def init_migrations():
    """Initialize migrations repository"""
    try:
        if os.path.exists("migrations"):
            click.echo("❌ Migrations directory already exists!")
            return

        from flask_migrate import init as flask_migrate_init

        flask_migrate_init()
        click.echo("✅ Migrations repository initialized!")
    except Exception as e:
        click.echo(f"❌ Error initializing migrations: {str(e)}")


@db_migrate.command()
@click.option("-m", "--message", required=True, help="Migration message")
@with_appcontext
def create_migration(message):
    """Create a new migration"""
    try:
        migrate(message=message)
        click.echo(f"✅ Migration created: {message}")
    except Exception as e:
        click.echo(f"❌ Error creating migration: {str(e)}")


@db_migrate.command()
@click.option("--revision", default="head", help="Revision to upgrade to")
@with_appcontext
def apply_migrations(revision):
    """Apply migrations to database"""
    try:
        upgrade(revision=revision)
        click.echo(f"✅ Migrations applied to {revision}")
    except Exception as e:
        click.echo(f"❌ Error applying migrations: {str(e)}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏆 Props With Pals Application Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except Exception as e:
        click.echo(f"❌ Database: Error - {str(e)}")

    for status_name in ("draft", "open", "locked", "completed"):
        count = Pool.query.filter_by(status=status_name).count()
        click.echo(f"   Pools {status_name}: {count}")

    click.echo(f"👥 Participants: {Participant.query.count()}")
    click.echo(f"❓ Props: {Prop.query.count()}")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
