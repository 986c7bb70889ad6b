"""skillref-engine — condense prose documentation into bounded reference files.

Parses markdown sources into heading-resolved sections, condenses them
under hard line budgets, assembles the reference artifacts of a skill,
and keeps a content-addressed manifest so drift between the sources and
the generated files can be detected.
"""

__version__ = "0.1.0"
