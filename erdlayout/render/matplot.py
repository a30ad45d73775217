import matplotlib.patches as mpatches
import matplotlib.pyplot as plt

from erdlayout.anchors import AnchorAssignment
from erdlayout.geometry import SIDES, side_midpoints
from erdlayout.graph import Graph


def render(
    g: Graph,
    anchors: list[AnchorAssignment],
    output_path: str,
    dpi: int = 72,
    scale: float = 0.25,
    margin: float = 50,
    diagnose: bool = False,
) -> None:
    """
    Render a laid-out diagram to a PNG image using matplotlib.

    Args:
        g: Graph snapshot with final positions.
        anchors: Anchor sides for the graph's edges.
        output_path: Path where the PNG file will be saved.
        dpi: Dots per inch for the output image (default: 72).
        scale: Pixels per diagram unit.
        margin: Blank border around the diagram, in diagram units.
        diagnose: If True, label every edge end with its anchor side.

    Diagram coordinates grow downwards, so the y axis is inverted.
    """
    if g.nodes:
        x_min = min(n.position.x for n in g.nodes) - margin
        y_min = min(n.position.y for n in g.nodes) - margin
        x_max = max(n.position.x + n.size.width for n in g.nodes) + margin
        y_max = max(n.position.y + n.size.height for n in g.nodes) + margin
    else:
        x_min, y_min, x_max, y_max = 0, 0, 2 * margin, 2 * margin

    width_px = (x_max - x_min) * scale
    height_px = (y_max - y_min) * scale

    fig = plt.figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi)

    # Add axes that fill the entire figure (no margins)
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_axis_off()
    ax.set_xlim(x_min, x_max)
    ax.set_ylim(y_max, y_min)

    # Draw edges (arrows) between their anchor points
    by_edge = {a.edge_id: a for a in anchors}
    for edge in g.edges:
        anchor = by_edge.get(edge.id)
        if anchor is None:
            continue
        src_pts = side_midpoints(g.node(edge.source))
        dst_pts = side_midpoints(g.node(edge.target))
        start_pt = src_pts[SIDES.index(anchor.source_side)]
        end_pt = dst_pts[SIDES.index(anchor.target_side)]
        ax.annotate(
            '',
            xy=tuple(end_pt),
            xytext=tuple(start_pt),
            arrowprops=dict(arrowstyle='->', lw=1, color='black', mutation_scale=20)
        )

        if diagnose:
            for pt, side in ((start_pt, anchor.source_side), (end_pt, anchor.target_side)):
                ax.text(pt[0], pt[1], side.value, fontsize=7, color='gray', ha='center', va='center')

    # Draw nodes (boxes)
    for node in g.nodes:
        rect = mpatches.Rectangle(
            (node.position.x, node.position.y), node.size.width, node.size.height,
            linewidth=1, edgecolor='black', facecolor='white'
        )
        ax.add_patch(rect)

        label = node.id if node.category is None else f"{node.id}\n[{node.category}]"
        ax.text(node.center.x, node.center.y, label, ha='center', va='center', fontsize=10)

    fig.savefig(
        output_path,
        dpi=dpi,
        bbox_inches=None,
        pad_inches=0,
        format='png'
    )

    plt.close(fig)
