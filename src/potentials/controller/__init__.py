from potentials.controller.simulation import Simulation

__all__ = ["Simulation"]
