"""Score calculators, discovered by CalculatorRegistry."""
