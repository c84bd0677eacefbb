"""Frontmatter parsing and validators for rules, skills, settings and commit messages."""