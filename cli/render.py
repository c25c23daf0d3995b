from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_BAR_WIDTH = 40

_DETAIL_FIELDS = {
    "network": (
        "most_active_gateways",
        "least_active_gateways",
    ),
    "gateway": (
        "most_active_sensors",
        "least_active_sensors",
        "outlier_sensors",
        "battery_charge_percentage",
    ),
    "sensor": (
        "mean",
        "variance",
        "stddev",
        "minimum_measured_value",
        "maximum_measured_value",
    ),
}

_RATIO_FIELDS = {
    "network": "gateways_load_ratio",
    "gateway": "sensors_load_ratio",
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value) or "-"
        typer.echo(f"{key}: {value}")


def render_histogram(buckets: List[Dict[str, Any]]) -> None:
    echo_heading("Histogram")
    if not buckets:
        typer.echo("No buckets.")
        return
    peak = max(bucket.get("count", 0) for bucket in buckets) or 1
    for bucket in buckets:
        count = bucket.get("count", 0)
        closing = "]" if bucket.get("closed") else ")"
        bar = "#" * round(_BAR_WIDTH * count / peak)
        typer.echo(f"  [{bucket.get('start')}, {bucket.get('end')}{closing} {count:>6} {bar}")


def render_report(kind: str, payload: Dict[str, Any]) -> None:
    echo_heading(f"{kind.capitalize()} Report")
    echo_key_values(
        [
            ("code", payload.get("code")),
            ("start_date", payload.get("start_date")),
            ("end_date", payload.get("end_date")),
            ("number_of_measurements", payload.get("number_of_measurements")),
        ]
    )
    details = _DETAIL_FIELDS.get(kind, ())
    if details:
        typer.echo()
        echo_key_values([(name, payload.get(name)) for name in details])

    ratio_field = _RATIO_FIELDS.get(kind)
    if ratio_field:
        ratios = payload.get(ratio_field) or {}
        typer.echo(f"{ratio_field}:")
        if not ratios:
            typer.echo("  -")
        for code, ratio in sorted(ratios.items()):
            typer.echo(f"  - {code}: {ratio:.2%}")

    outliers = payload.get("outliers")
    if outliers:
        typer.echo("outliers:")
        for item in outliers:
            typer.echo(f"  - {item.get('timestamp')}: {item.get('value')}")

    typer.echo()
    render_histogram(payload.get("histogram") or [])


def render_import(payload: Dict[str, Any]) -> None:
    echo_heading("Import Result")
    echo_key_values([("imported", payload.get("imported"))])

    errors = payload.get("errors") or []
    typer.echo()
    echo_heading("Errors")
    if errors:
        for error in errors:
            typer.echo(
                f"  - row {error.get('row_number')}: {error.get('reason')}"
            )
    else:
        typer.echo("No errors recorded.")
