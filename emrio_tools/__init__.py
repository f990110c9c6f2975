"""Monte Carlo internal robustness analysis of GVC indicators in a twofold EMRIO."""

__version__ = "0.1.0"
