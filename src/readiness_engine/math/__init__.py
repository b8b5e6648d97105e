"""Pure numeric helpers used by the calculators, the training-load engine and insights."""
