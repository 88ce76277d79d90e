"""
Allow running BASEBOT as a module: python -m basebot
"""

from basebot.bot import main

if __name__ == "__main__":
    main()
