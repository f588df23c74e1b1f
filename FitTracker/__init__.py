"""
    _______ __  ______                __
   / ____(_) /_/_  __/________ ______/ /_____  _____
  / /_  / / __// / / ___/ __ `/ ___/ //_/ _ \/ ___/
 / __/ / / /_ / / / /  / /_/ / /__/ ,< /  __/ /
/_/   /_/\__//_/ /_/   \__,_/\___/_/|_|\___/_/

FitTracker Project - client core for the FitTracker fitness service.

Session handling and the authenticated request pipeline used by every
FitTracker client front-end.
"""

__version__ = "1.0.0"
