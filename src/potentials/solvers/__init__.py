from potentials.solvers.solver import RelaxationSolver, SolverSettings, SolverState, SolveResult

__all__ = ["RelaxationSolver", "SolverSettings", "SolverState", "SolveResult"]
