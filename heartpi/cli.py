"""
Console front end.

    heartpi register alice
    heartpi survey alice --age-group 3 --gender female ...
    heartpi history alice
    heartpi notify alice caregiver@example.com
"""

from datetime import datetime

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from heartpi.config import get_config, print_config_summary, validate_config
from heartpi.domain.errors import HeartPiError
from heartpi.domain.models import DietType, FamilyCondition, Gender, RiskTier, SurveyAnswers
from heartpi.observability import configure_logging
from heartpi.services.heartpi import HeartPiService

console = Console()

TIER_STYLES = {RiskTier.LOW: "green", RiskTier.MODERATE: "yellow", RiskTier.HIGH: "bold red"}

AGE_GROUPS = "1. 18-24  2. 25-34  3. 35-44  4. 45-54  5. 55-64  6. 65+"
SLEEP_BUCKETS = "1. <4h  2. 4-5h  3. 6-7h  4. 7-8h  5. 8h+"
EXERCISE_BUCKETS = "1. Never  2. 1-2/week  3. 3-5/week  4. 6-7/week"
DIETS = "  ".join(f"{d.value}. {d.name.replace('_', ' ').title()}" for d in DietType)
FAMILY_CONDITIONS = ", ".join(c.value for c in FamilyCondition)


def _service(ctx: click.Context) -> HeartPiService:
    return ctx.obj["service"]


def _fail(e: HeartPiError) -> click.ClickException:
    return click.ClickException(str(e))


def _parse_family(ctx: click.Context, param: click.Parameter, value: str) -> frozenset[str]:
    """Comma-separated family conditions, or "none"."""
    items = {item.strip().lower() for item in value.split(",") if item.strip()}
    items.discard("none")
    unknown = sorted(items - {c.value for c in FamilyCondition})
    if unknown:
        raise click.BadParameter(
            f"unknown condition {', '.join(unknown)}; choose from {FAMILY_CONDITIONS} or none"
        )
    return frozenset(items)


@click.group()
@click.option("--store", "store_path", default=None, help="Record store CSV (overrides config)")
@click.option(
    "--vitals-log", "vitals_log_path", default=None, help="Vitals log CSV (overrides config)"
)
@click.pass_context
def main(ctx: click.Context, store_path: str | None, vitals_log_path: str | None) -> None:
    """HeartPi heart-health risk assessment."""
    config = get_config()
    overrides = {"record_store_path": store_path, "vitals_log_path": vitals_log_path}
    storage = config.storage.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    config = config.model_copy(update={"storage": storage})
    configure_logging(config.logging)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    if "service" not in ctx.obj:
        ctx.obj["service"] = HeartPiService.from_config(config)


@main.command()
@click.argument("username")
@click.password_option()
@click.pass_context
def register(ctx: click.Context, username: str, password: str) -> None:
    """Create an account."""
    service = _service(ctx)
    with service.session():
        try:
            name = service.register(username, password)
        except HeartPiError as e:
            raise _fail(e) from e
    console.print(f"[green]Registered {name}[/green]")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, username: str, password: str) -> None:
    """Check a username and password."""
    service = _service(ctx)
    with service.session():
        try:
            name = service.login(username, password)
        except HeartPiError as e:
            raise _fail(e) from e
    console.print(f"[green]Welcome back, {name}![/green]")


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.option("--age-group", type=click.IntRange(1, 6), prompt=f"Age group ({AGE_GROUPS})")
@click.option(
    "--gender",
    type=click.Choice([g.value for g in Gender]),
    prompt="Gender assigned at birth",
)
@click.option(
    "--sleep",
    "sleep_bucket",
    type=click.IntRange(1, 5),
    prompt=f"Sleep per night ({SLEEP_BUCKETS})",
)
@click.option(
    "--exercise",
    "exercise_bucket",
    type=click.IntRange(1, 4),
    prompt=f"Exercise ({EXERCISE_BUCKETS})",
)
@click.option("--diet", type=click.IntRange(1, 6), prompt=f"Average diet ({DIETS})")
@click.option("--smoker/--non-smoker", default=False, prompt="Are you a smoker?")
@click.option(
    "--family",
    default="none",
    callback=_parse_family,
    prompt=f"Conditions in your family, comma-separated ({FAMILY_CONDITIONS}) or none",
    help="Comma-separated conditions that run in your family",
)
@click.pass_context
def survey(
    ctx: click.Context,
    username: str,
    password: str,
    age_group: int,
    gender: str,
    sleep_bucket: int,
    exercise_bucket: int,
    diet: int,
    smoker: bool,
    family: frozenset[str],
) -> None:
    """Answer the lifestyle survey and record the simulated readings."""
    service = _service(ctx)
    with service.session():
        try:
            name = service.login(username, password)
            answers = SurveyAnswers.build(
                age_group=age_group,
                gender_at_birth=gender,
                sleep_hours_bucket=sleep_bucket,
                exercise_frequency_bucket=exercise_bucket,
                diet_type=diet,
                is_smoker=smoker,
                family_history=family,
            )
        except HeartPiError as e:
            raise _fail(e) from e
        submission = service.submit(name, answers)

    assessment = submission.assessment
    readings = assessment.readings
    style = TIER_STYLES[assessment.tier]

    table = Table(title="Simulated readings")
    table.add_column("Reading")
    table.add_column("Value", justify="right")
    table.add_row("Heart rate", f"{readings.heart_rate:.1f} BPM")
    table.add_row("Blood pressure", f"{readings.systolic_bp:.0f}/{readings.diastolic_bp:.0f} mmHg")
    table.add_row("Cholesterol", f"{readings.cholesterol:.0f} mg/dL")
    table.add_row("ECG", f"{readings.ecg:.2f} mV")

    message = f"[{style}]{assessment.message}[/{style}]"
    console.print(Panel(message, title=f"Risk score {assessment.score}"))
    console.print(table)

    if submission.persisted.is_err():
        console.print(f"[red]Readings were not saved: {submission.persisted.unwrap_err()}[/red]")
    else:
        console.print(f"Saved {submission.persisted.unwrap()} heart-rate readings for {name}.")

    tips = Table(title="Tips for a healthier heart", show_lines=True)
    tips.add_column("Category")
    tips.add_column("Tip")
    for tip in service.tips(assessment.tier):
        title = f"[bold red]{tip.title}[/bold red]" if tip.urgent else f"[bold]{tip.title}[/bold]"
        tips.add_row(tip.category, f"{title}\n{tip.description}")
    console.print(tips)


@main.command()
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def history(ctx: click.Context, username: str, password: str) -> None:
    """Show stored heart-rate readings."""
    service = _service(ctx)
    with service.session():
        try:
            name = service.login(username, password)
        except HeartPiError as e:
            raise _fail(e) from e
        samples = service.history(name)

    if not samples:
        console.print(f"No readings stored for {name}.")
        return

    table = Table(title=f"Heart-rate history for {name}")
    table.add_column("Time")
    table.add_column("BPM", justify="right")
    for sample in samples:
        when = datetime.fromtimestamp(sample.timestamp).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(when, f"{sample.heart_rate:.1f}")
    console.print(table)


@main.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List registered accounts."""
    service = _service(ctx)
    with service.session():
        names = service.accounts()
    if not names:
        console.print("No accounts registered yet.")
    for name in names:
        console.print(name)


@main.command()
@click.argument("username")
@click.argument("recipient")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def notify(ctx: click.Context, username: str, recipient: str, password: str) -> None:
    """Email a caregiver a summary of the stored heart-rate readings."""
    service = _service(ctx)
    with service.session():
        try:
            result = service.notify_caregiver(username, password, recipient)
        except HeartPiError as e:
            raise _fail(e) from e

    if result.is_err():
        raise click.ClickException(str(result.unwrap_err()))
    alert = result.unwrap()
    console.print(f"[green]Alert sent to {recipient}[/green] (risk: {alert.risk_label})")


@main.command("config")
def show_config() -> None:
    """Validate and print the active configuration."""
    validate_config()
    print_config_summary()


if __name__ == "__main__":
    main()
