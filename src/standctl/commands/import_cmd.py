"""Command: bulk-import stands from a CSV or Excel file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from standctl.commands._base import StandCommand

if TYPE_CHECKING:
    from standctl.commands._context import AppContext


@click.command(
    "import",
    cls=StandCommand,
    examples="""\
  standctl import stands.csv --dry-run
  standctl import stands.xlsx
  standctl --json import stands.tsv""",
)
@click.argument("file", type=click.Path(path_type=Path, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Parse and preview without uploading.")
@click.pass_obj
def import_cmd(app: AppContext, file: Path, dry_run: bool) -> None:
    """Normalize a stand spreadsheet and upload it in one batch."""
    from standctl.services.bulk_import import BulkImportService

    upload = app.settings.upload
    svc = BulkImportService(
        app.directory,
        app.request_context,
        max_file_bytes=upload.max_file_bytes,
        allowed_suffixes=upload.allowed_suffixes,
        delimiter=upload.delimiter,
    )
    app.emit(app.run(svc.import_file(file, dry_run=dry_run)))
