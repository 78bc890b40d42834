import pytest
from aws_cdk.assertions import Template

from tests.helpers import synth


@pytest.fixture(scope="module")
def template() -> Template:
    return synth()
