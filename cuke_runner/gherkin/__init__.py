from cuke_runner.gherkin.parser import find_example_row, locate_example, locate_scenario, parse_feature
from cuke_runner.gherkin.render import render_tree

__all__ = ["find_example_row", "locate_example", "locate_scenario", "parse_feature", "render_tree"]
