import click
from eth_utils import to_checksum_address


class MinFloat(click.ParamType):
    name = "minfloat"

    def __init__(self, min_value):
        self.min_value = min_value

    def convert(self, value, param, ctx):
        try:
            fvalue = float(value)
        except ValueError:
            self.fail(f"{value} is not a valid number", param, ctx)
        if fvalue < self.min_value:
            self.fail(
                f"{value} is less than the minimum allowed value of {self.min_value}", param, ctx
            )
        return fvalue


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        try:
            value = to_checksum_address(value=value)
        except ValueError:
            self.fail("Invalid ethereum address", param, ctx)
        else:
            return value
