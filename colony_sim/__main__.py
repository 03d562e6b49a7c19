import sys

from colony_sim.interface.cli import main

sys.exit(main())
