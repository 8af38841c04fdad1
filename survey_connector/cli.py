"""
Command Line Interface for the Survey Connector
Lists a form's tables, prints table schemas and exports flattened rows
"""

import click
import json
import sys
from pathlib import Path

from survey_connector.config import load_config, validate_config
from survey_connector.connector import TableConnector, state_from_config
from survey_connector.odk_client import ODKCentralClient
from survey_connector.session import JsonFileStore
from survey_connector.utils import create_run_timestamp, ensure_directory, save_run_metadata, setup_logging

DEFAULT_SESSION_FILE = '.survey_connector/session.json'

@click.group()
@click.option('--config', '-c', default=None, help='Path to config file')
@click.option('--session', '-s', 'session_file', default=DEFAULT_SESSION_FILE,
              help='File holding the chosen table and paging bounds')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, session_file, verbose):
    """Survey Connector CLI - flatten ODK Central forms into tables"""

    try:
        config_data = load_config(config)
        validate_config(config_data)
    except Exception as e:
        click.echo(f"❌ Configuration error: {str(e)}", err=True)
        sys.exit(1)

    log_level = "DEBUG" if verbose else config_data.get('logging', {}).get('level', 'INFO')
    setup_logging(level=log_level, log_file=config_data.get('logging', {}).get('file'))

    store = JsonFileStore(Path(session_file))
    state = state_from_config(config_data)
    saved = store.load_state()
    if saved.resource_path == state.resource_path:
        state = saved

    ctx.ensure_object(dict)
    ctx.obj['config'] = config_data
    ctx.obj['store'] = store
    ctx.obj['state'] = state

def _connector(ctx) -> TableConnector:
    return TableConnector(ODKCentralClient(ctx.obj['config']), ctx.obj['state'])

@cli.command()
@click.pass_context
def test_connection(ctx):
    """Test connection to ODK Central"""
    config = ctx.obj['config']

    click.echo("🔌 Testing ODK Central connection...")

    try:
        client = ODKCentralClient(config)
        if not client.test_connection():
            click.echo("❌ Connection failed!")
            sys.exit(1)

        form_id = config['odk']['form_id']
        click.echo("✅ Connection successful!")
        click.echo(f"\n📋 Project Information:")
        click.echo(f"  URL: {config['odk']['base_url']}")
        click.echo(f"  Project ID: {config['odk']['project_id']}")
        click.echo(f"  Form: {form_id} ({client.get_submission_count(form_id)} submissions)")

    except Exception as e:
        click.echo(f"❌ Connection error: {str(e)}", err=True)
        sys.exit(1)

@cli.command()
@click.pass_context
def tables(ctx):
    """List the tables of the configured form"""
    try:
        connector = _connector(ctx)
        form_config = connector.get_config()

        click.echo(f"📋 Tables of {form_config['form_id']}:")
        for table in form_config['tables']:
            marker = "👉" if table == form_config['table'] else "  "
            click.echo(f"  {marker} {table}")

    except Exception as e:
        click.echo(f"❌ Failed to list tables: {str(e)}", err=True)
        sys.exit(1)

@cli.command()
@click.option('--table', '-t', default=None, help='Table to describe (remembered for later commands)')
@click.option('--format', 'output_format', type=click.Choice(['table', 'json']), default='table', help='Output format')
@click.pass_context
def schema(ctx, table, output_format):
    """Show the flattened columns of a table"""
    try:
        connector = _connector(ctx)
        columns = connector.get_schema(table)
        ctx.obj['store'].save_state(connector.state)

        if output_format == 'json':
            click.echo(json.dumps(columns, indent=2))
            return

        click.echo(f"📊 Schema of {connector.state.table} ({len(columns)} columns)")
        click.echo("=" * 50)
        for column in columns:
            click.echo(f"  {column['id']:>4}  {column['name']}  [{column['type']}, {column['conceptRole']}]")

    except Exception as e:
        click.echo(f"❌ Schema error: {str(e)}", err=True)
        sys.exit(1)

@cli.command()
@click.option('--table', '-t', default=None, help='Table to export (defaults to the remembered table)')
@click.option('--fields', help='Comma-separated column names to export, in order')
@click.option('--row-count', type=int, default=None, help='Maximum number of rows to export')
@click.option('--format', '-f', 'output_format', default='csv', type=click.Choice(['csv', 'json']), help='Export format')
@click.option('--output', '-o', default='exports', help='Output directory')
@click.pass_context
def data(ctx, table, fields, row_count, output_format, output):
    """Export the flattened rows of a table"""
    state = ctx.obj['state']
    if table:
        state.table = table
    if row_count is not None:
        state.row_count = row_count

    field_names = [f.strip() for f in fields.split(',')] if fields else None

    try:
        connector = _connector(ctx)
        df = connector.get_dataframe(field_names)
        ctx.obj['store'].save_state(state)

        run_timestamp = create_run_timestamp()
        output_dir = ensure_directory(Path(output) / run_timestamp)
        file_path = output_dir / f"{connector.resource.form_id}-{state.table}.{output_format}"

        if output_format == 'csv':
            df.to_csv(file_path, index=False, encoding='utf-8')
        else:
            df.to_json(file_path, orient='records', indent=2)

        save_run_metadata(
            run_timestamp=run_timestamp,
            metadata={
                "resource_path": state.resource_path,
                "table": state.table,
                "columns": list(df.columns),
                "row_count": len(df),
                "file_path": str(file_path),
            },
            output_dir=output_dir
        )

        click.echo(f"✅ Exported {len(df)} rows x {len(df.columns)} columns of {state.table}")
        click.echo(f"  📁 {file_path}")

    except Exception as e:
        click.echo(f"❌ Export failed: {str(e)}", err=True)
        sys.exit(1)

if __name__ == '__main__':
    cli()
