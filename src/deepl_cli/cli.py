"""CLI interface for the DeepL API"""

import functools
import json
import logging
import platform
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import click

from deepl_cli import __version__
from deepl_cli.application.document_service import DocumentTranslationService
from deepl_cli.domain.errors import DeepLError
from deepl_cli.domain.models.document import DocumentInfo
from deepl_cli.domain.models.glossary import GlossaryEntry
from deepl_cli.domain.models.options import TranslateOptions
from deepl_cli.infrastructure.config.config_manager import ConfigManager
from deepl_cli.infrastructure.deepl.client import DeepLClient

logger = logging.getLogger(__name__)

FORMALITY_CHOICES = ["default", "more", "less", "prefer_more", "prefer_less"]


def setup_logging(verbosity: int = 0) -> None:
    """Setup logging configuration

    Warnings only by default, INFO with -v and DEBUG with -vv.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


@dataclass
class CliContext:
    """Per-invocation state shared by all commands

    The client is built once, on first use, and handed to every command.
    """

    config_path: Optional[Path] = None
    auth_key: Optional[str] = None
    server_url: Optional[str] = None
    verbosity: int = 0
    client: Optional[DeepLClient] = None
    config_manager: Optional[ConfigManager] = field(default=None, repr=False)

    def get_config_manager(self) -> ConfigManager:
        if self.config_manager is None:
            self.config_manager = ConfigManager(config_path=self.config_path)
        return self.config_manager

    def get_client(self) -> DeepLClient:
        if self.client is None:
            config_manager = self.get_config_manager()
            client_config = config_manager.get_client_config()
            overrides = {}
            if self.auth_key:
                overrides["auth_key"] = self.auth_key
            if self.server_url:
                overrides["server_url"] = self.server_url
            if overrides:
                client_config = client_config.model_copy(update=overrides)
            self.client = DeepLClient.from_config(
                client_config,
                config_manager.get_retry_config(),
                upload_chunk_size=config_manager.get_document_config().upload_chunk_size,
            )
        return self.client


pass_cli_context = click.make_pass_decorator(CliContext, ensure=True)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn client errors into click errors"""

    @functools.wraps(func)
    def wrapper(obj: CliContext, *args: Any, **kwargs: Any) -> Any:
        try:
            return func(obj, *args, **kwargs)
        except click.ClickException:
            raise
        except (DeepLError, ValueError, OSError) as e:
            _die(str(e), verbose=obj.verbosity > 1, exc=e)
        except KeyError as e:
            # Raised by the models when a response lacks a required field
            _die(f"Unexpected API response: missing field {e}", verbose=obj.verbosity > 1, exc=e)

    return wrapper


def _echo_json(value: Any) -> None:
    click.echo(json.dumps(value, ensure_ascii=False))


def _split_tags(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [tag for tag in value.split(",") if tag]


def _parse_document_handle(value: str) -> DocumentInfo:
    try:
        return DocumentInfo.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.option("--verbose", "-v", count=True, help="Increase output verbosity (repeatable)")
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to .deepl.yml config file",
)
@click.option(
    "--auth-key",
    envvar="DEEPL_AUTH_KEY",
    help="Authentication key as given in your DeepL account.",
)
@click.option("--server-url", envvar="DEEPL_SERVER_URL", help="An alternative server URL.")
@pass_cli_context
def cli(obj: CliContext, verbose: int, config: Optional[Path], auth_key: Optional[str], server_url: Optional[str]):
    """deepl - DeepL language translation cli"""
    setup_logging(verbose)
    obj.verbosity = verbose
    obj.config_path = config
    obj.auth_key = auth_key or obj.auth_key
    obj.server_url = server_url or obj.server_url


@cli.command()
@click.argument("texts", nargs=-1)
@click.option("--target-lang", "--to", "target_lang", required=True, help="Language to translate into")
@click.option("--source-lang", "--from", "source_lang", help="Language of the text, detected if omitted")
@click.option(
    "--split-sentences",
    type=click.Choice(["0", "1", "nonewlines"]),
    help="Whether to split input into sentences",
)
@click.option(
    "--preserve-formatting/--no-preserve-formatting",
    default=None,
    help="Whether to respect the original formatting",
)
@click.option("--formality", type=click.Choice(FORMALITY_CHOICES), help="Formal or informal language")
@click.option("--glossary-id", help="Glossary to use for the translation")
@click.option("--tag-handling", type=click.Choice(["xml", "html"]), help="Kind of tags to handle")
@click.option(
    "--outline-detection/--no-outline-detection",
    default=None,
    help="Whether to detect the XML structure automatically",
)
@click.option("--non-splitting-tags", help="Comma-separated XML tags which never split sentences")
@click.option("--splitting-tags", help="Comma-separated XML tags which always split sentences")
@click.option("--ignore-tags", help="Comma-separated XML tags marking text not to translate")
@click.option("--json", "as_json", is_flag=True, help="Print translation results as JSON")
@pass_cli_context
@handle_errors
def translate(
    obj: CliContext,
    texts: Tuple[str, ...],
    target_lang: str,
    source_lang: Optional[str],
    split_sentences: Optional[str],
    preserve_formatting: Optional[bool],
    formality: Optional[str],
    glossary_id: Optional[str],
    tag_handling: Optional[str],
    outline_detection: Optional[bool],
    non_splitting_tags: Optional[str],
    splitting_tags: Optional[str],
    ignore_tags: Optional[str],
    as_json: bool,
):
    """Translate text(s) into a target language.

    TEXTS: Texts to translate (read from stdin if omitted)
    """
    if not texts:
        stdin_text = click.get_text_stream("stdin").read()
        if not stdin_text.strip():
            raise click.UsageError("not enough arguments: no text given")
        texts = (stdin_text,)

    options = TranslateOptions(
        source_lang=source_lang,
        split_sentences=split_sentences,
        preserve_formatting=preserve_formatting,
        formality=formality,
        glossary_id=glossary_id,
        tag_handling=tag_handling,
        outline_detection=outline_detection,
        non_splitting_tags=_split_tags(non_splitting_tags),
        splitting_tags=_split_tags(splitting_tags),
        ignore_tags=_split_tags(ignore_tags),
    )
    translations = obj.get_client().translate_text(list(texts), target_lang, options)

    if as_json:
        _echo_json([asdict(t) for t in translations])
        return
    for translation in translations:
        if obj.verbosity > 0:
            click.echo(f"# Detected source language: {translation.detected_source_language}")
        click.echo(translation.text)


@cli.group()
def document():
    """Translate documents"""


@document.command("upload")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--target-lang", "--to", "target_lang", required=True, help="Language to translate into")
@click.option("--source-lang", "--from", "source_lang", help="Language of the document")
@click.option("--formality", type=click.Choice(FORMALITY_CHOICES), help="Formal or informal language")
@click.option("--glossary-id", help="Glossary to use for the translation")
@pass_cli_context
@handle_errors
def document_upload(
    obj: CliContext,
    files: Tuple[Path, ...],
    target_lang: str,
    source_lang: Optional[str],
    formality: Optional[str],
    glossary_id: Optional[str],
):
    """Upload documents for translation.

    Prints one JSON object per document with its ID and key.
    """
    options = TranslateOptions(source_lang=source_lang, formality=formality, glossary_id=glossary_id)
    client = obj.get_client()
    uploaded = []
    try:
        for path in files:
            info = client.translate_document_upload(path, target_lang, options)
            uploaded.append({"document_path": str(path), **asdict(info)})
    finally:
        # Report what was uploaded even if a later file failed
        _echo_json(uploaded)


@document.command("status")
@click.argument("handles", nargs=-1, required=True)
@pass_cli_context
@handle_errors
def document_status(obj: CliContext, handles: Tuple[str, ...]):
    """Retrieve the status of document translations.

    HANDLES: Documents as ID:KEY
    """
    infos = [_parse_document_handle(h) for h in handles]
    client = obj.get_client()
    statuses = []
    try:
        for info in infos:
            statuses.append(asdict(client.translate_document_status(info.document_id, info.document_key)))
    finally:
        _echo_json(statuses)


@document.command("download")
@click.argument("handle")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to file instead of stdout",
)
@pass_cli_context
@handle_errors
def document_download(obj: CliContext, handle: str, output: Optional[Path]):
    """Download a translated document.

    HANDLE: Document as ID:KEY
    """
    info = _parse_document_handle(handle)
    client = obj.get_client()
    if output is not None:
        DocumentTranslationService(client).download(info, output)
        return

    chunks = client.translate_document_download(info.document_id, info.document_key)
    with click.open_file("-", "wb") as stdout:
        for chunk in chunks:
            stdout.write(chunk)
        stdout.flush()


@document.command("translate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True)
@click.option("--target-lang", "--to", "target_lang", required=True, help="Language to translate into")
@click.option("--source-lang", "--from", "source_lang", help="Language of the document")
@click.option("--formality", type=click.Choice(FORMALITY_CHOICES), help="Formal or informal language")
@click.option("--glossary-id", help="Glossary to use for the translation")
@pass_cli_context
@handle_errors
def document_translate(
    obj: CliContext,
    file: Path,
    output: Path,
    target_lang: str,
    source_lang: Optional[str],
    formality: Optional[str],
    glossary_id: Optional[str],
):
    """Upload a document, wait for the translation and download it."""
    document_config = obj.get_config_manager().get_document_config()
    service = DocumentTranslationService(
        obj.get_client(),
        poll_interval=document_config.poll_interval,
        max_poll_interval=document_config.max_poll_interval,
    )
    options = TranslateOptions(source_lang=source_lang, formality=formality, glossary_id=glossary_id)
    status = service.translate_document(file, output, target_lang, options)
    _echo_json(asdict(status))


@cli.group()
def glossaries():
    """Manage glossaries"""


@glossaries.command("language-pairs")
@pass_cli_context
@handle_errors
def glossaries_language_pairs(obj: CliContext):
    """List language pairs supported by glossaries"""
    _echo_json([asdict(p) for p in obj.get_client().get_glossary_language_pairs()])


@glossaries.command("create")
@click.argument("entries", nargs=-1, required=True)
@click.option("--name", required=True, help="Name of the glossary")
@click.option("--source-lang", "--from", "source_lang", required=True, help="Language of the source terms")
@click.option("--target-lang", "--to", "target_lang", required=True, help="Language of the target terms")
@pass_cli_context
@handle_errors
def glossaries_create(obj: CliContext, entries: Tuple[str, ...], name: str, source_lang: str, target_lang: str):
    """Create a glossary.

    ENTRIES: Term pairs as SOURCE=TARGET
    """
    try:
        parsed = [GlossaryEntry.parse(e) for e in entries]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="ENTRIES") from e
    glossary = obj.get_client().create_glossary(name, source_lang, target_lang, parsed)
    _echo_json(asdict(glossary))


@glossaries.command("list")
@pass_cli_context
@handle_errors
def glossaries_list(obj: CliContext):
    """List all glossaries"""
    _echo_json([asdict(g) for g in obj.get_client().list_glossaries()])


@glossaries.command("info")
@click.argument("glossary_ids", nargs=-1, required=True)
@pass_cli_context
@handle_errors
def glossaries_info(obj: CliContext, glossary_ids: Tuple[str, ...]):
    """Retrieve glossary details"""
    client = obj.get_client()
    found = []
    try:
        for glossary_id in glossary_ids:
            found.append(asdict(client.get_glossary(glossary_id)))
    finally:
        _echo_json(found)


@glossaries.command("entries")
@click.argument("glossary_id")
@click.option("--format", "entries_format", type=click.Choice(["tsv", "csv"]), default="tsv", show_default=True)
@pass_cli_context
@handle_errors
def glossaries_entries(obj: CliContext, glossary_id: str, entries_format: str):
    """Retrieve glossary entries"""
    separator = "\t" if entries_format == "tsv" else ","
    for entry in obj.get_client().get_glossary_entries(glossary_id):
        click.echo(f"{entry.source}{separator}{entry.target}")


@glossaries.command("delete")
@click.argument("glossary_ids", nargs=-1, required=True)
@pass_cli_context
@handle_errors
def glossaries_delete(obj: CliContext, glossary_ids: Tuple[str, ...]):
    """Delete glossaries; prints the IDs that were deleted"""
    client = obj.get_client()
    deleted = []
    try:
        for glossary_id in glossary_ids:
            client.delete_glossary(glossary_id)
            deleted.append(glossary_id)
    finally:
        if deleted:
            click.echo("\n".join(deleted))


@cli.command()
@click.option("--type", "lang_type", type=click.Choice(["source", "target"]), help="Type of languages to list")
@click.option("--source", "source_flag", is_flag=True, help="Shorthand for --type=source")
@click.option("--target", "target_flag", is_flag=True, help="Shorthand for --type=target")
@pass_cli_context
@handle_errors
def languages(obj: CliContext, lang_type: Optional[str], source_flag: bool, target_flag: bool):
    """Retrieve supported languages"""
    if sum([lang_type is not None, source_flag, target_flag]) > 1:
        raise click.UsageError("`--type`, `--source` and `--target` options are mutually exclusive")
    if source_flag:
        lang_type = "source"
    elif target_flag:
        lang_type = "target"

    langs = obj.get_client().get_languages(lang_type)
    if obj.verbosity > 0:
        click.echo(f"{(lang_type or 'source').title()} languages available:")
    for lang in langs:
        click.echo(lang.describe())


@cli.command()
@pass_cli_context
@handle_errors
def usage(obj: CliContext):
    """Retrieve usage information and account limits"""
    _echo_json(asdict(obj.get_client().get_usage()))


@cli.command()
@pass_cli_context
def version(obj: CliContext):
    """Display version information"""
    if obj.verbosity > 0:
        click.echo(f"{__version__} (python {platform.python_version()}, {sys.platform})")
    else:
        click.echo(__version__)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
