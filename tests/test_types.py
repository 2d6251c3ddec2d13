import click
import pytest
from click.testing import CliRunner

from dfdeploy.options import fund_option, whitelist_option
from dfdeploy.types import ChecksumAddress, MinFloat


@click.command()
@whitelist_option
@fund_option
def echo_options(whitelist, fund):
    click.echo(f"{whitelist} {fund}")


def test_deploy_option_defaults():
    result = CliRunner().invoke(echo_options, [])
    assert result.exit_code == 0
    assert result.output.strip() == "True 0.5"


def test_deploy_options():
    result = CliRunner().invoke(echo_options, ["--no-whitelist", "--fund", "1.25"])
    assert result.exit_code == 0
    assert result.output.strip() == "False 1.25"


def test_negative_fund_is_rejected():
    result = CliRunner().invoke(echo_options, ["--fund=-1"])
    assert result.exit_code != 0
    assert "less than the minimum" in result.output


def test_min_float():
    assert MinFloat(0).convert("0.5", None, None) == 0.5
    with pytest.raises(click.BadParameter):
        MinFloat(0).convert("abc", None, None)


def test_checksum_address():
    address = ChecksumAddress().convert("0x" + "ab" * 20, None, None)
    assert address.lower() == "0x" + "ab" * 20
    with pytest.raises(click.BadParameter):
        ChecksumAddress().convert("0x1234", None, None)
