import sys

from untis_bot.main import main

sys.exit(main())
