import dataclasses
import gc
import logging
from typing import Any, Dict, Optional

import click
import numpy as np
import yaml

from stagger.util.mpi import world_rank

from .driver import Driver, DriverConfig


logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

log_levels = {
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def configure_logging(log_rank: Optional[int], log_level: str):
    """
    Configure logging for the driver.

    Args:
        log_rank: the only rank which logs, every rank logs if None,
            ignored when running without mpi4py
        log_level: one of the keys of log_levels
    """
    rank = world_rank()
    if rank is None:
        log_format = "%(asctime)s [%(levelname)s] %(name)s:%(message)s"
    elif log_rank is None or log_rank == rank:
        log_format = f"%(asctime)s [%(levelname)s] (rank {rank}) %(name)s:%(message)s"
    else:
        return
    logging.basicConfig(
        level=log_levels[log_level],
        format=log_format,
        handlers=[logging.StreamHandler()],
        datefmt=DATE_FORMAT,
    )


def load_config(config_path: str, overrides: Dict[str, Any]) -> DriverConfig:
    """
    Read a DriverConfig from a yaml file.

    Top-level entries given in overrides replace those of the file,
    entries whose override is None are kept.
    """
    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}
    config.update(
        {key: value for key, value in overrides.items() if value is not None}
    )
    return DriverConfig.from_dict(config)


def summarize(driver: Driver):
    """log the Courant number and the range and total of each field on this rank"""
    logger.info(
        "finished %d steps at time %g, maximum Courant number %.3g",
        driver.n_timesteps,
        driver.time,
        driver.courants.max_abs(),
    )
    for name, field in driver.fields.items():
        values = field.level(0).view[:]
        logger.info(
            "%s: min %.6g, max %.6g, sum %.6g",
            name,
            np.min(values),
            np.max(values),
            np.sum(values),
        )


@click.command()
@click.argument(
    "CONFIG_PATH",
    required=True,
    type=click.Path(exists=True, readable=True, dir_okay=False, resolve_path=True),
)
@click.option("--nt", type=click.INT, help="number of time steps, overrides the file")
@click.option("--dt", type=click.FLOAT, help="time step, overrides the file")
@click.option(
    "--log-rank",
    type=click.INT,
    help="rank to log from, all ranks log by default, ignored without MPI",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(list(log_levels)),
    help="one of 'debug', 'info', 'warning', 'error', 'critical'",
)
def command_line(
    config_path: str,
    nt: Optional[int],
    dt: Optional[float],
    log_rank: Optional[int],
    log_level: str,
):
    """
    Advect the fields of a run.

    CONFIG_PATH is the path to a DriverConfig yaml file.
    """
    configure_logging(log_rank=log_rank, log_level=log_level)
    driver_config = load_config(config_path, {"nt": nt, "dt": dt})
    logger.info("DriverConfig loaded: %s", yaml.dump(dataclasses.asdict(driver_config)))
    main(driver_config=driver_config)


def main(driver_config: DriverConfig) -> Driver:
    driver = Driver(config=driver_config)
    try:
        driver.step_all()
        driver.record_final()
        summarize(driver)
    finally:
        driver.cleanup()
    return driver


if __name__ == "__main__":
    command_line()
    # drop objects holding MPI requests before mpi4py finalizes
    gc.collect()
