"""CLI entrypoint for snippet-check."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from snippet_check import __version__
from snippet_check.analyzer import (
    AnalysisError,
    AnalysisRequest,
    RequestError,
    analyze,
    parse_request,
)
from snippet_check.config import (
    FORMATS,
    VARIANTS,
    AppConfig,
    default_config_template,
    load_app_config,
)
from snippet_check.languages import (
    LanguagePlan,
    language_for_path,
    resolve_language,
    select_rules,
)
from snippet_check.output import build_error_payload, render_human, render_json
from snippet_check.probe import NodeProbe, Probe
from snippet_check.rules import RULE_SETS, build_rules, list_rule_info

app = typer.Typer(
    name="snippet-check",
    no_args_is_help=True,
    help="Run heuristic quality checks over code snippets and grade them.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level for diagnostics on stderr."),
    ] = None,
) -> None:
    """Root command callback."""
    _ = version
    if log_level is None:
        return
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@app.command("check")
def check_command(
    code: Annotated[str | None, typer.Option(help="Snippet text to analyze.")] = None,
    file: Annotated[Path | None, typer.Option("--file", help="Path to a source file.")] = None,
    stdin: Annotated[bool, typer.Option(help="Read the snippet from stdin.")] = False,
    request: Annotated[
        Path | None,
        typer.Option("--request", help='JSON {"code", "language"} payload file, "-" for stdin.'),
    ] = None,
    language: Annotated[
        str | None,
        typer.Option("--language", "-l", help="Language tag, e.g. js, python, html, css."),
    ] = None,
    root: Annotated[Path, typer.Option(help="Project root used to discover config.")] = Path("."),
    format: Annotated[
        str | None, typer.Option(help="Output format: human|json.", show_default="human")
    ] = None,
    variant: Annotated[
        str | None,
        typer.Option(help="JSON response shape: scored|summary.", show_default="scored"),
    ] = None,
    probe: Annotated[
        bool | None,
        typer.Option("--probe/--no-probe", help="Execute JavaScript in a sandboxed node process."),
    ] = None,
    timeout: Annotated[
        float | None, typer.Option(help="Probe wall-clock limit in seconds.")
    ] = None,
    strict_html: Annotated[
        bool | None,
        typer.Option("--strict-html/--lenient-html", help="Missing DOCTYPE/<html> is an error."),
    ] = None,
    fail_under: Annotated[
        int | None, typer.Option(help="Exit nonzero if the score is below this value.")
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Analyze a snippet and print its findings, score and grade."""
    app_config = _load_config_or_raise(root, config_file)
    output_format = _choice_or_default(
        value=format, default=app_config.format, allowed=FORMATS, field_name="--format"
    )
    output_variant = _choice_or_default(
        value=variant, default=app_config.variant, allowed=VARIANTS, field_name="--variant"
    )
    html_strict = strict_html if strict_html is not None else app_config.html.strict

    analysis_request, input_source = _resolve_request(
        code=code, file=file, stdin=stdin, request=request, language=language
    )
    plan = _select_rules_or_raise(analysis_request.language, app_config, html_strict=html_strict)
    active_probe = _build_probe(app_config, enabled=probe, timeout=timeout)

    try:
        report = analyze(
            analysis_request,
            rules=plan.rules,
            probe=active_probe,
            html_strict=html_strict,
        )
    except AnalysisError as exc:
        if output_format == "json":
            typer.echo(json.dumps(build_error_payload("analysis failed", details=str(exc))))
        else:
            typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if output_format == "json":
        typer.echo(render_json(report, variant=output_variant, input_source=input_source))
    else:
        typer.echo(render_human(report))

    threshold = fail_under if fail_under is not None else app_config.fail_under
    if threshold is not None and report.score < threshold:
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    language: Annotated[
        str | None, typer.Option("--language", "-l", help="Only list rules for this language.")
    ] = None,
    root: Annotated[Path, typer.Option(help="Project root used to discover config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available rules and whether the config enables them."""
    output_format = format.lower()
    if output_format not in FORMATS:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    canonical: str | None = None
    if language is not None:
        canonical = resolve_language(language)
        if canonical is None:
            raise typer.BadParameter(f"Unknown language: {language}", param_hint="--language")

    app_config = _load_config_or_raise(root, config_file)
    active_ids = _active_rule_ids(app_config)
    rule_info = list_rule_info(canonical, html_strict=app_config.html.strict)

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "language": item.language,
                    "severity": item.severity,
                    "enabled": item.rule_id in active_ids[item.language],
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids[item.language] else "disabled"
        lines.append(
            f"- {item.rule_id} [{item.language}, {item.severity}, {status}] - {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    root: Annotated[Path, typer.Option(help="Project root used to discover config.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in FORMATS:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = {
        name: sorted(ids) for name, ids in _active_rule_ids(app_config).items()
    }

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- variant: {payload['variant']}",
        f"- fail_under: {payload['fail_under']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- html.strict: {payload['html']['strict']}",
        f"- probe.enabled: {payload['probe']['enabled']}",
        f"- probe.timeout_seconds: {payload['probe']['timeout_seconds']}",
        f"- probe.node_binary: {payload['probe']['node_binary']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".snippet-check.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


@app.command("config-validate")
def config_validate_command(
    root: Annotated[Path, typer.Option(help="Project root used to discover config.")] = Path("."),
    config_file: Annotated[
        Path,
        typer.Option("--config", help="Path to config TOML file to validate."),
    ] = Path(".snippet-check.toml"),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
) -> None:
    """Validate a config file and report active rules."""
    output_format = format.lower()
    if output_format not in FORMATS:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(root, config_file)
    active_ids = _active_rule_ids(app_config)
    payload = {
        "ok": True,
        "source": app_config.source,
        "active_rule_count": sum(len(ids) for ids in active_ids.values()),
    }
    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return
    typer.echo(
        "\n".join(
            [
                "Config is valid.",
                f"- source: {payload['source']}",
                f"- active_rule_count: {payload['active_rule_count']}",
            ]
        )
    )


def main() -> None:
    """Console script entrypoint."""
    app()


def _resolve_request(
    *,
    code: str | None,
    file: Path | None,
    stdin: bool,
    request: Path | None,
    language: str | None,
) -> tuple[AnalysisRequest, str]:
    provided = [
        name
        for name, value in (
            ("--code", code is not None),
            ("--file", file is not None),
            ("--stdin", stdin),
            ("--request", request is not None),
        )
        if value
    ]
    if len(provided) != 1:
        raise typer.BadParameter("Provide exactly one of --code, --file, --stdin, --request.")

    if request is not None:
        if language is not None:
            raise typer.BadParameter("--language cannot be combined with --request.")
        return (_read_request_payload(request), f"request:{request}")

    if code is not None:
        source, input_source = code, "code"
    elif file is not None:
        try:
            source = file.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(str(exc), param_hint="--file") from exc
        input_source = f"file:{file}"
        if language is None:
            language = language_for_path(file)
    else:
        source, input_source = sys.stdin.read(), "stdin"

    try:
        analysis_request = parse_request({"code": source, "language": language})
    except RequestError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return (analysis_request, input_source)


def _read_request_payload(path: Path) -> AnalysisRequest:
    try:
        raw = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(str(exc), param_hint="--request") from exc
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}", param_hint="--request") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter("Request must be a JSON object.", param_hint="--request")
    try:
        return parse_request(payload)
    except RequestError as exc:
        raise typer.BadParameter(str(exc), param_hint="--request") from exc


def _load_config_or_raise(root: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(root, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _select_rules_or_raise(
    language: str, app_config: AppConfig, *, html_strict: bool
) -> LanguagePlan:
    try:
        return select_rules(
            language,
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            html_strict=html_strict,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _active_rule_ids(app_config: AppConfig) -> dict[str, set[str]]:
    try:
        return {
            name: {
                rule.rule_id
                for rule in build_rules(
                    name,
                    enabled_rule_ids=app_config.rule_enable,
                    disabled_rule_ids=app_config.rule_disable,
                    html_strict=app_config.html.strict,
                )
            }
            for name in RULE_SETS
        }
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc


def _build_probe(
    app_config: AppConfig, *, enabled: bool | None, timeout: float | None
) -> Probe | None:
    probe_enabled = enabled if enabled is not None else app_config.probe.enabled
    if not probe_enabled:
        return None
    timeout_seconds = timeout if timeout is not None else app_config.probe.timeout_seconds
    try:
        return NodeProbe(
            node_binary=app_config.probe.node_binary,
            timeout_seconds=timeout_seconds,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--timeout") from exc


def _choice_or_default(
    *,
    value: str | None,
    default: str,
    allowed: set[str],
    field_name: str,
) -> str:
    resolved = (value or default).lower()
    if resolved not in allowed:
        choices = ", ".join(sorted(allowed))
        raise typer.BadParameter(f"{field_name} must be one of: {choices}", param_hint=field_name)
    return resolved
