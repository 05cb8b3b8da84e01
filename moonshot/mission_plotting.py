"""Interactive 3D mission visualization using Plotly.

Shows the rocket's path through the whole system with every celestial body,
which the top-down matplotlib view in :mod:`moonshot.plotting` flattens.
"""

import numpy as np
import plotly.graph_objects as go
from beartype import beartype

from moonshot.dynamics.state import BodyState
from moonshot.simulation.simulator import SimulationResult

BODY_COLORSCALES = {
    "primary": [[0, "rgb(30,60,120)"], [1, "rgb(30,80,140)"]],
    "target": [[0, "rgb(120,120,120)"], [1, "rgb(180,180,180)"]],
    "other": [[0, "rgb(90,50,30)"], [1, "rgb(140,90,60)"]],
}


def _sphere(body: BodyState, colorscale: list, opacity: float = 0.6) -> go.Surface:
    u = np.linspace(0, 2 * np.pi, 40)
    v = np.linspace(0, np.pi, 20)
    x = body.position[0] + body.radius * np.outer(np.cos(u), np.sin(v))
    y = body.position[1] + body.radius * np.outer(np.sin(u), np.sin(v))
    z = body.position[2] + body.radius * np.outer(np.ones(u.size), np.cos(v))
    return go.Surface(
        x=x, y=y, z=z,
        colorscale=colorscale,
        showscale=False,
        opacity=opacity,
        name=body.name,
        hoverinfo="name",
    )


@beartype
def plot_mission_3d(
    result: SimulationResult,
    title: str = "Earth to Moon",
    show_all_bodies: bool = True,
) -> go.Figure:
    """Create a 3D view of a guided run.

    Args:
        result: Recorded run
        title: Figure title
        show_all_bodies: Also draw bodies other than the primary and target

    Returns:
        Plotly Figure object
    """
    positions = result.position
    speeds = result.speed
    phases = [p.name for p in result.phases] + ["END"] * (len(result.states) - len(result.phases))

    hover_text = [
        f"T+{t:.1f}s<br>Phase: {phase}<br>Speed: {s:.2f}"
        for t, phase, s in zip(result.times, phases, speeds, strict=True)
    ]

    fig = go.Figure()
    fig.add_trace(go.Scatter3d(
        x=positions[:, 0], y=positions[:, 1], z=positions[:, 2],
        mode="lines",
        line=dict(color=speeds, colorscale="Plasma", width=5,
                  colorbar=dict(title="Speed")),
        name="Rocket",
        text=hover_text,
        hovertemplate="%{text}<extra></extra>",
    ))

    final = result.final_state
    for body in final.bodies:
        if body.name == result.primary:
            role = "primary"
        elif body.name == result.target:
            role = "target"
        elif show_all_bodies:
            role = "other"
        else:
            continue
        fig.add_trace(_sphere(body, BODY_COLORSCALES[role]))

    # Target body track
    track = result.body_positions(result.target)
    fig.add_trace(go.Scatter3d(
        x=track[:, 0], y=track[:, 1], z=track[:, 2],
        mode="lines",
        line=dict(color="gray", width=3, dash="dash"),
        name=f"{result.target} track",
    ))

    # Start/End markers
    fig.add_trace(go.Scatter3d(
        x=[positions[0, 0]], y=[positions[0, 1]], z=[positions[0, 2]],
        mode="markers", marker=dict(size=6, color="lime"),
        name="Start",
    ))
    fig.add_trace(go.Scatter3d(
        x=[positions[-1, 0]], y=[positions[-1, 1]], z=[positions[-1, 2]],
        mode="markers", marker=dict(size=6, color="red"),
        name="Exploded" if result.exploded else "End",
    ))

    fig.update_layout(
        title=dict(text=title, font=dict(size=24), x=0.5),
        height=900,
        template="plotly_dark",
        scene=dict(
            xaxis_title="X",
            yaxis_title="Y",
            zaxis_title="Z",
            aspectmode="data",
        ),
    )
    return fig
