"""
The MODEL layer contains pure data structures describing a scene.
It has NO knowledge of the simulation grid or the solver.
It deals with Geometry, Electrical roles and the shape inventory.
"""
