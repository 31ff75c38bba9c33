from __future__ import annotations

from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
import importlib
import logging
from pathlib import Path
import sys
from typing import Iterator, List, Optional

import typer

from metagen.config import BuildSettings, resolve_settings
from metagen.exceptions import MetagenError
from metagen.runtime.build_mode import BuildMode
from metagen.runtime.env_policy import mode_scope, root_scope
from metagen.store import COMMANDS_DIR, FragmentStore
from metagen.synthesis.model import CommandFragment
from metagen.synthesis.registry import (
    DEFAULT_METHOD_NAME,
    generate_registry,
    render_registry,
)

app = typer.Typer(add_completion=False, help="Capture command fragments and generate dispatch registries.")

_STDOUT_ALIAS = "-"


@dataclass(frozen=True)
class CliState:
    project_root: Path
    config_path: Path | None

    def settings(self) -> BuildSettings:
        return resolve_settings(self.project_root, self.config_path)


def _state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        state = CliState(project_root=Path.cwd(), config_path=None)
        ctx.obj = state
    return state


@contextmanager
def _phase_scope(state: CliState, mode: BuildMode) -> Iterator[BuildSettings]:
    settings = state.settings()
    root_text = str(state.project_root.resolve())
    inserted = root_text not in sys.path
    if inserted:
        sys.path.insert(0, root_text)
    try:
        with ExitStack() as stack:
            stack.enter_context(mode_scope(mode))
            stack.enter_context(root_scope(settings.root))
            yield settings
    finally:
        if inserted:
            sys.path.remove(root_text)


def _import_fresh(module_name: str) -> None:
    module = sys.modules.get(module_name)
    if module is None:
        importlib.import_module(module_name)
    else:
        importlib.reload(module)


def _fail(exc: Exception) -> typer.Exit:
    typer.echo(f"error: {exc}", err=True)
    return typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    root: Path = typer.Option(Path("."), "--root", help="Project root holding metagen.toml."),
    config: Optional[Path] = typer.Option(None, "--config"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = CliState(project_root=root, config_path=config)


@app.command("capture-interface")
def capture_interface_command(
    ctx: typer.Context,
    module: str = typer.Argument(..., help="Module declaring the @command_interface method."),
) -> None:
    """Import MODULE in interface-capture mode."""
    state = _state(ctx)
    try:
        with _phase_scope(state, BuildMode.INTERFACE_CAPTURE) as settings:
            _import_fresh(module)
    except MetagenError as exc:
        raise _fail(exc)
    typer.echo(f"Captured interface into {settings.root}")


@app.command("collect")
def collect_command(
    ctx: typer.Context,
    modules: List[str] = typer.Argument(..., help="Modules declaring @command functions."),
) -> None:
    """Import MODULES in command-collection mode."""
    state = _state(ctx)
    try:
        with _phase_scope(state, BuildMode.COMMAND_COLLECTION) as settings:
            for module in modules:
                _import_fresh(module)
    except MetagenError as exc:
        raise _fail(exc)
    typer.echo(f"Collected {len(modules)} module(s) into {settings.commands_dir}")


@app.command("generate")
def generate_command(
    ctx: typer.Context,
    dispatch: str = typer.Option(..., "--dispatch", help="Name of the generated dispatch class."),
    interface: str = typer.Option(..., "--interface", help="Name of the interface class."),
    interface_module: Optional[str] = typer.Option(None, "--interface-module"),
    method: str = typer.Option(DEFAULT_METHOD_NAME, "--method"),
    prelude: Optional[Path] = typer.Option(
        None, "--prelude", help="File whose text is placed before the generated code."
    ),
    output: str = typer.Option(_STDOUT_ALIAS, "--output", "-o"),
    sort_by_code: Optional[bool] = typer.Option(
        None, "--sort-by-code/--walk-order", help="Order variants by command code."
    ),
) -> None:
    """Write the dispatch registry built from the stored fragments."""
    settings = _state(ctx).settings()
    try:
        unit = generate_registry(
            dispatch,
            interface,
            settings.commands_dir,
            method_name=method,
            sort_by_code=settings.sort_by_code if sort_by_code is None else sort_by_code,
        )
    except MetagenError as exc:
        raise _fail(exc)
    try:
        prelude_text = prelude.read_text(encoding="utf-8") if prelude is not None else ""
    except OSError as exc:
        raise _fail(exc)
    text = render_registry(unit, interface_module=interface_module, prelude=prelude_text)
    if output == _STDOUT_ALIAS:
        typer.echo(text, nl=False)
        return
    target = Path(output)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise _fail(exc)
    typer.echo(f"Wrote {dispatch} with {len(unit.variants)} variant(s) to {target}")


@app.command("fragments")
def fragments_command(ctx: typer.Context) -> None:
    """List the stored command fragments."""
    settings = _state(ctx).settings()
    store = FragmentStore(settings.root)
    try:
        for path, document in store.iter_documents(COMMANDS_DIR):
            fragment = CommandFragment.from_document(document)
            typer.echo(f"{fragment.code:#04x}\t{fragment.name}\t{path}")
    except (MetagenError, ValueError) as exc:
        raise _fail(exc)


if __name__ == "__main__":  # pragma: no cover
    app()
