"""src/smoothcast/cli.py"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from smoothcast.common.config import AppConfig, load_config
from smoothcast.common.errors import SmoothcastError
from smoothcast.common.logging import setup_logging
from smoothcast.io.readers import read_series_csv
from smoothcast.io.writers import write_csv, write_json
from smoothcast.modeling.grid_search import InsufficientData, search
from smoothcast.pipelines.run_forecast import (
    ForecastRequest,
    SmoothingConfig,
    resolve_model,
    run_forecast,
)
from smoothcast.reporting.tables import make_acf_table, make_forecast_table, make_leaderboard_table, make_metrics_table
from smoothcast.validation.checks import validate_series_frame

app = typer.Typer(help="Holt / Holt-Winters exponential smoothing forecasts")

DEFAULT_CONFIG = "configs/config.yaml"
console = Console()


def _load(config_path: str) -> AppConfig:
    cfg = load_config(config_path)
    setup_logging(cfg)
    return cfg


def _read_request(
    cfg: AppConfig,
    input_path: Path,
    value_col: str,
    time_col: Optional[str],
    smoothing: SmoothingConfig,
    horizon: Optional[int],
    confidence: Optional[float],
) -> ForecastRequest:
    df = read_series_csv(input_path, value_col=value_col, time_col=time_col)
    validate_series_frame(df, min_length=1).raise_if_failed()
    return ForecastRequest.from_frame(
        df,
        value_col="value",
        time_col="timestamp",
        field=value_col,
        config=smoothing,
        horizon=cfg.horizon if horizon is None else horizon,
        confidence=cfg.confidence if confidence is None else confidence,
    )


def _print_table(df, title: str) -> None:
    table = Table(title=title)
    for col in df.columns:
        table.add_column(str(col))
    for row in df.itertuples(index=False):
        table.add_row(*[f"{v:.6g}" if isinstance(v, float) else str(v) for v in row])
    console.print(table)


def _fail(e: Exception) -> None:
    print(f"[bold red]Error:[/bold red] {e}")
    raise typer.Exit(code=1)


@app.command()
def init(config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config")) -> None:
    """Create expected directories from config (artifacts/, etc.)."""
    cfg = _load(config_path)

    created = cfg.ensure_directories()
    print("[bold green]Init complete.[/bold green]")
    if created:
        print("Created directories:")
        for p in created:
            print(f"  - {p}")
    else:
        print("No directories needed (already exist).")


@app.command()
def forecast(
    input_path: Path = typer.Argument(..., help="CSV file holding the series"),
    value_col: str = typer.Option("value", help="Column with the observations"),
    time_col: Optional[str] = typer.Option(None, help="Column with timestamps (row order if omitted)"),
    model: str = typer.Option("auto", help="simple | double | holt | triple | auto"),
    grid_search: bool = typer.Option(True, help="Optimize parameters by grid search"),
    alpha: Optional[float] = typer.Option(None, help="Level smoothing (no grid search)"),
    beta: Optional[float] = typer.Option(None, help="Trend smoothing (no grid search)"),
    gamma: Optional[float] = typer.Option(None, help="Seasonal smoothing (no grid search)"),
    damping: Optional[float] = typer.Option(None, help="Trend damping factor in (0, 1]"),
    seasonal_period: Optional[int] = typer.Option(None, help="Season length m (detected if omitted)"),
    seasonal_type: str = typer.Option("additive", help="additive | multiplicative"),
    search_damping: bool = typer.Option(False, help="Also search the damping grid"),
    holdout: Optional[int] = typer.Option(None, help="Holdout length for the grid search"),
    horizon: Optional[int] = typer.Option(None, help="Steps ahead (config default if omitted)"),
    confidence: Optional[float] = typer.Option(None, help="0.80 | 0.90 | 0.95 | 0.99"),
    output: Optional[Path] = typer.Option(None, help="JSON output path (output_dir if omitted)"),
    config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
) -> None:
    """Fit, forecast and diagnose one series; write JSON + CSV artifacts."""
    cfg = _load(config_path)
    try:
        smoothing = SmoothingConfig(
            model=model,
            grid_search=grid_search,
            alpha=alpha,
            beta=beta,
            gamma=gamma,
            damping=damping,
            seasonal_period=seasonal_period,
            seasonal_type=seasonal_type,
            search_damping=search_damping,
            holdout=holdout,
        )
        request = _read_request(cfg, input_path, value_col, time_col, smoothing, horizon, confidence)
        response = run_forecast(
            request,
            grid=cfg.grid_spec(),
            holdout_fraction=cfg.holdout_fraction,
            max_lag=cfg.max_lag,
        )
    except (SmoothcastError, KeyError, FileNotFoundError) as e:
        _fail(e)
        return

    if output is None:
        out_dir = cfg.paths.get("output_dir", cfg.project_root / "artifacts" / "forecasts")
        output = Path(out_dir) / f"{request.field}_forecast.json"
    write_json(response.to_dict(), output)
    table = make_forecast_table(response.forecast, value_col=request.field)
    csv_path = write_csv(table, output.with_suffix(".csv"))

    _print_table(table, f"{request.field}: {response.forecast.label}")
    if response.metrics is not None:
        _print_table(make_metrics_table(response.metrics, response.holdout_metrics), "Accuracy")
    if response.fallback:
        print(f"[yellow]Fallback:[/yellow] {response.fallback}")
    print(f"Saved forecast: {output}")
    print(f"Saved forecast table: {csv_path}")
    print("[bold green]Forecasting complete.[/bold green]")


@app.command("search")
def search_cmd(
    input_path: Path = typer.Argument(..., help="CSV file holding the series"),
    value_col: str = typer.Option("value", help="Column with the observations"),
    time_col: Optional[str] = typer.Option(None, help="Column with timestamps (row order if omitted)"),
    model: str = typer.Option("auto", help="simple | double | holt | triple | auto"),
    seasonal_period: Optional[int] = typer.Option(None, help="Season length m (detected if omitted)"),
    seasonal_type: str = typer.Option("additive", help="additive | multiplicative"),
    search_damping: bool = typer.Option(False, help="Also search the damping grid"),
    holdout: Optional[int] = typer.Option(None, help="Holdout length"),
    config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
) -> None:
    """Run the parameter grid search and print the leaderboard."""
    cfg = _load(config_path)
    try:
        smoothing = SmoothingConfig(
            model=model,
            seasonal_period=seasonal_period,
            seasonal_type=seasonal_type,
            search_damping=search_damping,
            holdout=holdout,
        )
        request = _read_request(cfg, input_path, value_col, time_col, smoothing, None, None)
        series = request.ordered_values()
        spec, fallback = resolve_model(series, smoothing)
        outcome = search(
            series,
            spec,
            grid=cfg.grid_spec(),
            holdout=holdout,
            holdout_fraction=cfg.holdout_fraction,
            search_damping=search_damping,
        )
    except (SmoothcastError, KeyError, FileNotFoundError) as e:
        _fail(e)
        return

    if isinstance(outcome, InsufficientData):
        print(f"[yellow]{outcome.reason}[/yellow]")
        raise typer.Exit(code=2)

    if fallback:
        print(f"[yellow]Fallback:[/yellow] {fallback}")
    _print_table(make_leaderboard_table(outcome), f"{spec.label}: top {len(outcome.leaderboard)}")
    print(
        f"Evaluated {outcome.candidates_evaluated} candidates "
        f"(train={outcome.train_size}, holdout={outcome.test_size})"
    )


@app.command("diagnose")
def diagnose_cmd(
    input_path: Path = typer.Argument(..., help="CSV file holding the series"),
    value_col: str = typer.Option("value", help="Column with the observations"),
    time_col: Optional[str] = typer.Option(None, help="Column with timestamps (row order if omitted)"),
    model: str = typer.Option("auto", help="simple | double | holt | triple | auto"),
    seasonal_period: Optional[int] = typer.Option(None, help="Season length m (detected if omitted)"),
    max_lag: Optional[int] = typer.Option(None, help="ACF / Ljung-Box lags (config default if omitted)"),
    config_path: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
) -> None:
    """Fit the best model and print residual diagnostics."""
    cfg = _load(config_path)
    try:
        smoothing = SmoothingConfig(model=model, seasonal_period=seasonal_period)
        request = _read_request(cfg, input_path, value_col, time_col, smoothing, None, None)
        response = run_forecast(
            request,
            grid=cfg.grid_spec(),
            holdout_fraction=cfg.holdout_fraction,
            max_lag=cfg.max_lag if max_lag is None else max_lag,
        )
    except (SmoothcastError, KeyError, FileNotFoundError) as e:
        _fail(e)
        return

    report = response.diagnostics
    if report is None:
        print(f"[yellow]No diagnostics: {response.fallback}[/yellow]")
        raise typer.Exit(code=2)

    _print_table(make_acf_table(report), "Residual ACF")
    print(f"Ljung-Box Q={report.ljung_box_q:.4f} dof={report.ljung_box_dof} p={report.ljung_box_p_value:.4f}")
    print(f"Residual mean={report.residual_mean:.4g} std={report.residual_std:.4g}")
    print(f"Normality (IQR/sigma, ~1.349 if normal)={report.normality_score:.4f}")
    if report.is_white_noise is False:
        print("[yellow]Residuals show autocorrelation at the 5% level.[/yellow]")


if __name__ == "__main__":
    app()
