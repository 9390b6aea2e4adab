# This module provides the interface to the host R installation.
# RRuntime is the port the inventory builder and the reconciler talk
# to, RscriptRuntime is the implementation that shells out to Rscript.
from rship._src.runtime.runtime import RRuntime
from rship._src.runtime.rscript import RscriptRuntime

__all__ = ["RRuntime", "RscriptRuntime"]
