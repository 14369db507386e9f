"""loguploader CLI - Main commands."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

app = typer.Typer(
    name="loguploader",
    help="Upload logs to the log ingestion service",
    add_completion=False
)
console = Console()


def parse_headers(values: Optional[List[str]]) -> dict:
    """Parse repeated NAME=VALUE options."""
    headers = {}
    for value in values or []:
        name, sep, header_value = value.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME=VALUE, got {value!r}", param_hint="--header")
        headers[name.strip()] = header_value
    return headers


@app.command()
def upload(
    file_path: Path = typer.Argument(..., help="Log file to upload", exists=True, dir_okay=False),
    url: str = typer.Option(..., "--url", "-u", envvar="LOGUPLOADER_URL", help="Base URL of the log service"),
    logger_name: str = typer.Option(..., "--logger-name", "-l", help="Logger name"),
    tag: str = typer.Option(..., "--tag", "-t", help="Log tag"),
    end_time: Optional[datetime] = typer.Option(None, "--end-time", help="End time (ISO-8601, default now)"),
    token: str = typer.Option(..., "--token", envvar="LOGUPLOADER_TOKEN", help="Bearer token"),
    max_retries: int = typer.Option(5, "--max-retries", help="Retries on connection failures"),
    delay: float = typer.Option(10.0, "--delay", help="Backoff unit in seconds"),
    process_context: Optional[str] = typer.Option(None, "--process-context", help="Process context header"),
    process_context_variant: Optional[str] = typer.Option(None, "--process-context-variant", help="Process context variant header"),
    request_context: Optional[str] = typer.Option(None, "--request-context", help="Request context header"),
    tmp: Optional[bool] = typer.Option(None, "--tmp/--no-tmp", help="Mark the log as temporary"),
    header: Optional[List[str]] = typer.Option(None, "--header", "-H", help="Extra header NAME=VALUE"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Upload a log file."""
    from loguploader import LogUploader, LogMetadata, LogUploadError, setup_logging
    
    logging.basicConfig(format="%(asctime)s %(name)s %(levelname)s %(message)s")
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    
    metadata = LogMetadata.create(
        end_time=end_time or datetime.now(timezone.utc),
        logger_name=logger_name,
        tag=tag,
        process_context=process_context,
        process_context_variant=process_context_variant,
        tmp=tmp,
        request_context=request_context,
        extra_headers=parse_headers(header)
    )
    uploader = LogUploader(url, lambda: f"Bearer {token}", max_retries, delay)
    
    try:
        result = uploader.upload_file(file_path, metadata)
    except LogUploadError as e:
        console.print(f"[red]Upload failed ({e.kind.value}): {e}[/red]")
        raise typer.Exit(1)
    
    console.print(f"[green]Uploaded:[/green] {file_path.name}")
    console.print(f"MD5: {result.md5sum}")
    console.print(f"Attempts: {result.attempts}")


@app.command()
def checksum(
    file_path: Path = typer.Argument(..., help="File to checksum", exists=True, dir_okay=False),
):
    """Print the MD5 checksum sent with an upload."""
    from loguploader import compute_md5
    
    try:
        md5sum = compute_md5(open(file_path, "rb"))
    except OSError as e:
        console.print(f"[red]Could not read {file_path}: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"{md5sum}  {file_path}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
