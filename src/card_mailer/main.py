"""CLI entry point for the business card email assistant."""

import json
import logging
from pathlib import Path
from typing import Annotated

import pyperclip
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from card_mailer.capture import read_image_as_data_uri
from card_mailer.composer import EmailComposer
from card_mailer.config import get_settings
from card_mailer.errors import CardMailerError, InputValidationError
from card_mailer.extractor import create_extractor
from card_mailer.models.email import CardInput, GeneratedEmail, InputMode
from card_mailer.session import Session

app = typer.Typer(
    name="cardmail",
    help="Read a business card and draft the thank-you email.",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

MSG_ANALYZING = "名刺情報を解析中..."
MSG_COPIED = "✓ コピーしました"
PASTE_END_MARKER = "."


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
):
    """Business card to email assistant."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
        force=True,
    )
    # Request bodies carry the whole image.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.command()
def compose(
    image: Annotated[
        Path | None,
        typer.Option(
            "--image",
            "-i",
            help="Path to the business card image (max 5MB)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    text: Annotated[
        str | None,
        typer.Option(
            "--text",
            "-t",
            help="Text copied from the business card, '-' reads stdin",
        ),
    ] = None,
    text_file: Annotated[
        Path | None,
        typer.Option(
            "--text-file",
            help="File containing the business card text",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    sender: Annotated[
        str | None,
        typer.Option("--sender", "-s", help="Sender name"),
    ] = None,
    event: Annotated[
        str | None,
        typer.Option("--event", "-e", help="Event where the card was exchanged"),
    ] = None,
    extractor: Annotated[
        str | None,
        typer.Option(
            "--extractor",
            help="Extractor backend: openrouter:<model> or gemini:<model>",
        ),
    ] = None,
    output_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output raw JSON instead of formatted output",
        ),
    ] = False,
    copy: Annotated[
        str | None,
        typer.Option("--copy", "-c", help="Copy 'subject' or 'body' to the clipboard"),
    ] = None,
):
    """Draft the thank-you email for one business card."""
    settings = get_settings()

    if copy is not None and copy not in ("subject", "body"):
        console.print(f"[red]Error:[/red] Invalid copy target '{copy}'. Use 'subject' or 'body'.")
        raise typer.Exit(1)

    try:
        card = _build_card_input(image, text, text_file, settings.max_image_bytes)
        composer = EmailComposer(create_extractor(settings, extractor))

        with console.status(MSG_ANALYZING):
            email = composer.compose(
                card,
                sender or settings.default_sender,
                event or settings.default_event,
            )
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except CardMailerError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    if output_json:
        print(json.dumps(email.model_dump(), ensure_ascii=False, indent=2))
    else:
        _print_email(email)

    if copy:
        _copy_to_clipboard(getattr(email, copy))


def _build_card_input(
    image: Path | None,
    text: str | None,
    text_file: Path | None,
    max_image_bytes: int,
) -> CardInput:
    """Validate the mutually exclusive inputs and build the request."""
    given = [option for option in (image, text, text_file) if option is not None]
    if len(given) != 1:
        raise InputValidationError(
            "名刺の画像またはテキストのどちらか一方を指定してください。"
        )

    if image is not None:
        return CardInput.from_image(read_image_as_data_uri(image, max_image_bytes))

    if text_file is not None:
        text = text_file.read_text(encoding="utf-8")
    elif text == "-":
        text = typer.get_text_stream("stdin").read()

    if not text or not text.strip():
        raise InputValidationError("名刺のテキスト情報を入力してください。")
    return CardInput.from_text(text)


def _print_email(email: GeneratedEmail, copied: tuple[bool, bool] = (False, False)):
    """Print subject and body panels."""
    subject_title = "件名" + (f" [green]{MSG_COPIED}[/green]" if copied[0] else "")
    body_title = "本文" + (f" [green]{MSG_COPIED}[/green]" if copied[1] else "")

    console.print()
    console.print(Panel(Text(email.subject), title=subject_title, title_align="left", border_style="magenta"))
    console.print(Panel(Text(email.body), title=body_title, title_align="left", border_style="magenta"))
    console.print()


def _copy_to_clipboard(text: str) -> bool:
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        console.print(f"[yellow]Warning:[/yellow] Clipboard unavailable: {e}")
        return False
    console.print(f"[green]{MSG_COPIED}[/green]")
    return True


@app.command()
def session(
    extractor: Annotated[
        str | None,
        typer.Option(
            "--extractor",
            help="Extractor backend: openrouter:<model> or gemini:<model>",
        ),
    ] = None,
):
    """Interactive session: pick a sender, load cards and copy emails."""
    settings = get_settings()
    try:
        extractor_instance = create_extractor(settings, extractor)
    except CardMailerError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)

    state = Session(EmailComposer(extractor_instance), settings)
    try:
        _run_session(state)
    except (KeyboardInterrupt, EOFError):
        console.print()


def _run_session(state: Session):
    """Menu loop over the session state until the user quits."""
    while True:
        _print_session(state)

        actions = {"s": "差出人を選択", "a": "社員を追加", "e": "イベント名を変更", "m": "入力モード切替"}
        if state.mode is InputMode.IMAGE:
            actions["i"] = "名刺画像を選択"
        else:
            actions["t"] = "テキストを入力"
        if state.can_generate:
            actions["g"] = "メールを作成する"
        if state.result is not None:
            actions["cs"] = "件名をコピー"
            actions["cb"] = "本文をコピー"
        actions["q"] = "終了"

        console.print("  ".join(f"[bold]{key}[/bold] {label}" for key, label in actions.items()))
        choice = Prompt.ask("操作", choices=list(actions), show_choices=False)

        if choice == "q":
            return
        if choice == "s":
            _choose_sender(state)
        elif choice == "a":
            name = Prompt.ask("新しい社員名", default="")
            if not state.add_sender(name):
                console.print("[yellow]名前が空のため追加しませんでした。[/yellow]")
        elif choice == "e":
            state.event_name = Prompt.ask("イベント名", default=state.event_name)
        elif choice == "m":
            state.set_mode(InputMode.TEXT if state.mode is InputMode.IMAGE else InputMode.IMAGE)
        elif choice == "i":
            raw = Prompt.ask("画像ファイルのパス")
            state.select_image(Path(raw.strip().strip("'\"")).expanduser())
        elif choice == "t":
            state.set_text(_read_pasted_text())
        elif choice == "g":
            with console.status(MSG_ANALYZING):
                state.generate()
        elif choice in ("cs", "cb"):
            try:
                state.copy("subject" if choice == "cs" else "body")
            except pyperclip.PyperclipException as e:
                console.print(f"[yellow]Warning:[/yellow] Clipboard unavailable: {e}")


def _print_session(state: Session):
    """Print the current settings, input, error and result."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("差出人名", escape(state.sender_name))
    table.add_row("イベント名", escape(state.event_name))
    if state.mode is InputMode.IMAGE:
        table.add_row("入力モード", "名刺画像")
        table.add_row("画像", escape(str(state.image_path)) if state.image_path else "[dim]未選択[/dim]")
    else:
        table.add_row("入力モード", "テキスト入力")
        table.add_row("テキスト", f"{len(state.text)}文字" if state.text else "[dim]未入力[/dim]")

    console.print()
    console.print(Panel(table, title="設定（あなたの情報）", title_align="left", border_style="blue"))

    if state.error:
        console.print(f"[red]{escape(state.error)}[/red]")

    if state.result is not None:
        _print_email(
            state.result,
            copied=(state.is_copied("subject"), state.is_copied("body")),
        )


def _choose_sender(state: Session):
    for index, name in enumerate(state.senders, start=1):
        marker = "*" if name == state.sender_name else " "
        console.print(f" {marker} {index}. {escape(name)}")
    number = IntPrompt.ask(
        "番号",
        choices=[str(i) for i in range(1, len(state.senders) + 1)],
        show_choices=False,
    )
    state.select_sender(state.senders[number - 1])


def _read_pasted_text() -> str:
    """Read pasted lines until a line containing only the end marker, or EOF."""
    console.print(
        "名刺に記載されているテキストを貼り付けてください"
        f"（{PASTE_END_MARKER} だけの行で終了）:"
    )
    lines = []
    while True:
        try:
            line = console.input()
        except EOFError:
            break
        if line.strip() == PASTE_END_MARKER:
            break
        lines.append(line)
    return "\n".join(lines).strip("\n")


@app.command()
def version():
    """Show version information."""
    from card_mailer import __version__

    console.print(f"cardmail version {__version__}")


if __name__ == "__main__":
    app()
