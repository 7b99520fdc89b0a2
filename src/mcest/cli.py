"""
Command-line interface for mcest.

Usage:
    mcest count 100000
    mcest volume 1000000 --threads 4 --no-extra-restrictions
    mcest volume 100000 --random-numbers-file numbers.txt
    mcest integrate 10000 --sampler circle --epsilon 0.005
    mcest work-time 1000000 --sweep --max-seconds 60

Usage errors (bad or missing N, unreadable files) and estimation errors
exit with status 1.
"""

import logging
import sys
from typing import List, Optional

import click

from mcest.core.config import DEFAULT_DELTA, DEFAULT_SEED, EstimationConfig
from mcest.core.entities import EstimationMode
from mcest.core.errors import MonteCarloError
from mcest.core.sources import UniformTable
from mcest.experiment.runner import run_adaptive, run_estimation, sample_size_sweep
from mcest.model.assignment import AllOf, AssignmentProblem
from mcest.model.height import ConeHeight, DiskPointSampler, unit_square_point
from mcest.model.hypersphere import Hypersphere
from mcest.model.tasks import TaskNetwork
from mcest.results.report import format_adaptive, format_result, format_sweep

logger = logging.getLogger(__name__)


SAMPLE_COUNT = click.IntRange(min=0)
WORKER_COUNT = click.IntRange(min=1)
MISS_PROBABILITY = click.FloatRange(0.0, 1.0, min_open=True, max_open=True)

threads_option = click.option(
    '--threads', '-t',
    type=WORKER_COUNT,
    default=None,
    help='Worker threads (default: one per CPU)'
)
delta_option = click.option(
    '--delta', '-d',
    type=MISS_PROBABILITY,
    default=DEFAULT_DELTA,
    help=f'Intervals hold with probability 1 - delta (default: {DEFAULT_DELTA})'
)


def _make_config(ctx: click.Context, n: int, threads: Optional[int], delta: float,
                 default_seed: int) -> EstimationConfig:
    seed = ctx.obj.get('seed')
    return EstimationConfig(
        n_samples=n,
        delta=delta,
        num_workers=threads,
        random_seed=default_seed if seed is None else seed,
    )


@click.group()
@click.option(
    '--seed',
    type=int,
    default=None,
    help='Master random seed (default: per command)'
)
@click.option(
    '--verbose/--quiet', '-v/-q',
    default=False,
    help='Log run progress to stderr'
)
@click.pass_context
def cli(ctx, seed, verbose):
    """Monte Carlo estimates with confidence bounds."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.ensure_object(dict)
    ctx.obj['seed'] = seed


@cli.command()
@click.argument('n', type=SAMPLE_COUNT)
@threads_option
@delta_option
@click.option(
    '--exact',
    is_flag=True,
    help='Also count exactly by enumerating every assignment (slow)'
)
@click.pass_context
def count(ctx, n, threads, delta, exact):
    """Count student-professor assignments from N random samples."""
    config = _make_config(ctx, n, threads, delta, default_seed=DEFAULT_SEED)
    problem = AssignmentProblem()

    cases = [
        ("Counting with only one restriction", (problem.language_matches,)),
        ("Counting with 2 restrictions", (problem.language_matches, problem.load_balanced)),
    ]
    for title, predicates in cases:
        result = run_estimation(
            config, problem.sample, AllOf(predicates),
            mode=EstimationMode.COUNTING,
            measure=problem.space_size,
            phase=title,
        )
        click.echo()
        click.echo(format_result(result, title=title))
        if exact:
            click.echo(f"exact count : {problem.exact_count(*predicates)}")


@cli.command()
@click.argument('n', type=SAMPLE_COUNT)
@threads_option
@delta_option
@click.option(
    '--extra-restrictions/--no-extra-restrictions',
    default=True,
    help='Intersect the hypersphere with the linear constraints (default: on)'
)
@click.option(
    '--random-numbers-file', '-f',
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='Whitespace-separated uniform numbers to use instead of the generator'
)
@click.pass_context
def volume(ctx, n, threads, delta, extra_restrictions, random_numbers_file):
    """Estimate the volume of a 6-D hypersphere region from N points."""
    config = _make_config(ctx, n, threads, delta, default_seed=DEFAULT_SEED)
    sphere = Hypersphere(extra_restrictions=extra_restrictions)

    source_factory = None
    if random_numbers_file is not None:
        table = UniformTable.from_file(random_numbers_file)
        logger.info(f"Loaded {len(table)} numbers from {random_numbers_file}")
        source_factory = table.streams(
            config.num_workers, n_samples=n, per_sample=sphere.dimension
        )

    result = run_estimation(
        config, sphere.sample, sphere.contains,
        mode=EstimationMode.COUNTING,
        measure=sphere.enclosing_volume,
        source_factory=source_factory,
        phase="volume",
    )
    click.echo(format_result(result, title="Hypersphere volume", scientific=True))


@cli.command()
@click.argument('n', type=SAMPLE_COUNT)
@threads_option
@delta_option
@click.option(
    '--sampler', '-s',
    type=click.Choice(['uniform', 'circle']),
    default='uniform',
    help='uniform: points over the unit square; circle: points inside the circle only'
)
@click.option(
    '--epsilon', '-e',
    type=click.FloatRange(0.0, min_open=True),
    default=0.01,
    help='Target half-width for the sized run (default: 0.01)'
)
@click.pass_context
def integrate(ctx, n, threads, delta, sampler, epsilon):
    """Integrate the cone height function: pilot with N, then a sized run."""
    config = _make_config(ctx, n, threads, delta, default_seed=35141)
    cone = ConeHeight()

    if sampler == 'circle':
        point_sampler = DiskPointSampler(center=cone.center, radius=cone.radius)
        measure = point_sampler.region_measure
    else:
        point_sampler = unit_square_point
        measure = 1.0

    result = run_adaptive(
        config, point_sampler, cone,
        target_half_width=epsilon,
        mode=EstimationMode.INTEGRATION,
        measure=measure,
    )
    click.echo(format_adaptive(result))
    click.echo(f"exact integral : {cone.exact_integral():.5e}")


@cli.command('work-time')
@click.argument('n', type=SAMPLE_COUNT)
@threads_option
@delta_option
@click.option(
    '--sweep',
    is_flag=True,
    help='Run N = 10, 100, ... up to N and print a table'
)
@click.option(
    '--max-seconds',
    type=click.FloatRange(0.0, min_open=True),
    default=60.0,
    help='With --sweep, stop after a run slower than this (default: 60)'
)
@click.pass_context
def work_time(ctx, n, threads, delta, sweep, max_seconds):
    """Estimate the expected total work time of the task network."""
    config = _make_config(ctx, n, threads, delta, default_seed=DEFAULT_SEED)
    network = TaskNetwork()

    if sweep:
        logger.info(f"{config.num_workers} concurrent workers")
        result = sample_size_sweep(
            config, network.sample_durations, network.total_work_time,
            mode=EstimationMode.RUNNING_SUM,
            max_samples=n,
            max_seconds=max_seconds,
        )
        click.echo(format_sweep(result))
        return

    result = run_estimation(
        config, network.sample_durations, network.total_work_time,
        mode=EstimationMode.RUNNING_SUM,
        phase="work-time",
    )
    click.echo(format_result(result, title="Total work time"))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit status."""
    try:
        cli.main(args=argv, prog_name="mcest", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except MonteCarloError as e:
        click.echo(f"Error: {e}", err=True)
        return 1
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == '__main__':
    run()
