import pytest

import stagger.util


def pytest_addoption(parser):
    parser.addoption(
        "--fast",
        action="store_true",
        default=False,
        help="skip redundant parametrizations of the slower tests",
    )


@pytest.fixture
def fast(pytestconfig):
    return pytestconfig.getoption("fast")


@pytest.fixture
def communicator():
    """single-rank communicator, halo updates wrap periodically"""
    return stagger.util.Communicator.from_layout(
        comm=stagger.util.LocalComm(rank=0, total_ranks=1, buffer_dict={}),
        layout=(1, 1),
    )


@pytest.fixture
def advect(communicator):
    """
    Advance a field by n_steps time steps the way the driver does, without
    forcing: every pass of the scheme, cycling and halo refresh in between.
    """

    def advect(field, scheme, courants, n_steps=1):
        for i_step in range(n_steps):
            if i_step == 0 and scheme.startup_scheme is not None:
                step_scheme = scheme.startup_scheme
            else:
                step_scheme = scheme
            for step in range(1, step_scheme.num_steps + 1):
                if step > 1:
                    field.cycle()
                    communicator.fill_halos(field, level=0)
                step_scheme.prepare(field)
                step_scheme.apply(field, courants, step)
            field.cycle()
            communicator.fill_halos(field, level=0)

    return advect
