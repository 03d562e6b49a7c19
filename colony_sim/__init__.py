"""
colony_sim — discrete-event simulation of an ant colony searching for
low-weight Hamiltonian cycles.

Subpackages:
    shared     — SimulationConfig, CycleRecord, Observation, the weighted graph
    engine     — interval policies, events and queue, the Simulator
    interface  — input loading, text reports, the command-line entry point

Run:
    python -m colony_sim -f graph.txt
    python -m colony_sim -r 8 10 1 1.0 1.0 0.2 2.0 10.0 1.0 50 300
"""
