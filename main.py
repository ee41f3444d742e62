#!/usr/bin/env python3
"""hostdock CLI entrypoint."""

from hostdock.hostdock import main

if __name__ == "__main__":
    main()
