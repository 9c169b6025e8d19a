"""Pytest configuration and fixtures."""

import os

import pytest

from bibfilter.core.models import Block, Operator, QueryConfig


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and settings files for each test.

    This prevents a developer's own bibfilter settings from leaking
    into the tests.
    """
    original_env = os.environ.copy()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("BIBFILTER_QUERY_CONFIG", raising=False)
    monkeypatch.delenv("BIBFILTER_CASE_SENSITIVE", raising=False)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_bibtex() -> str:
    """Two entries: a remote VR user study and an on-site art piece."""
    return """
@article{sample1,
  title={A remote study of immersive virtual reality task performance},
  author={Doe, Jane},
  year={2024},
  journal={Imaginary Journal},
  abstract={We conducted an online study using immersive virtual reality with participant-owned HMDs to evaluate behavior and task performance.}
}

@inproceedings{sample2,
  title={On-site VR art},
  author={Roe, John},
  year={2023},
  booktitle={Nice Conf},
  abstract={An on-site installation without user study.}
}
"""


@pytest.fixture
def mixed_bibtex() -> str:
    """Entries covering matched, partial, unmatched and ineligible cases."""
    return """
% exported from a digital library
@article{full,
  title = {Crowdsourced virtual reality experiments},
  abstract = {A web-based study with remote participants.},
  keywords = {virtual reality, crowdsourcing},
  doi = {10.1000/full}
}
@inproceedings{half,
  title = "Virtual reality in the operating room",
  abstract = {A lab deployment with surgeons.},
  booktitle = {MedVR}
}
@misc{none,
  title = {Soil moisture sensing},
  abstract = {Field measurements in wheat.}
}
@book{empty,
  author = {Nobody, A.},
  year = {1999}
}
"""


@pytest.fixture
def default_config() -> QueryConfig:
    return QueryConfig.default()


@pytest.fixture
def two_block_config() -> QueryConfig:
    """VR terms AND remote-study terms, both literal."""
    return QueryConfig(
        blocks=(
            Block(name="VR", terms=("virtual reality", "VR")),
            Block(name="Remote", terms=("web-based", "remote", "crowdsourc*")),
        ),
        operators=(Operator.AND,),
    )
