"""Command line interface for StackPlan."""
