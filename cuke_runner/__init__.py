"""cuke-runner: discover Gherkin features, run Cucumber, map results back onto scenarios."""

__version__ = "0.1.0"
