import sys

from works_bridge.action import main


if __name__ == "__main__":
    sys.exit(main())
