#!/usr/bin/env python
import sys

from config.settings import use_default_settings


def main():
    use_default_settings(fallback="local")
    from django.core.management import execute_from_command_line  # noqa: PLC0415

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
