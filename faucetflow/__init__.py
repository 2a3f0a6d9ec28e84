"""
Faucet Flow
===========

Generative images from many coloured streams pushed around by invisible
forces.

A handful of faucets near the middle of the canvas emit streams.  Each
stream is advanced step by step through a fixed field of point forces:

  - Forces push with a Gaussian falloff (inward, outward or linear)
  - Velocity saturates per axis at a velocity cap
  - Colour fades exponentially with distance travelled
  - Every step is drawn additively onto a shared canvas

A stream stops once it leaves the canvas or its decay budget runs out.
The summed canvas is tone-mapped to RGB and written as a PNG.
"""

__version__ = "1.0.0"
