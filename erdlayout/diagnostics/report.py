from collections import Counter

from erdlayout.layout.engines import LayoutOutput
from erdlayout.metrics import count_edge_crossings


def generate_layout_report(output: LayoutOutput, engine_name: str) -> str:
    """Generate a diagnostic report for a computed layout.

    Args:
        output: Result of ``run_layout``.
        engine_name: Name of the engine that produced it.

    Returns:
        Formatted diagnostic report string
    """
    g = output.graph
    meta = output.metadata
    lines = []

    lines.append("=" * 60)
    lines.append("LAYOUT DIAGNOSTIC REPORT")
    lines.append("=" * 60)
    lines.append("")

    # 1. Summary
    lines.append("## Summary")
    lines.append("")
    lines.append(f"Engine: {engine_name}")
    lines.append(f"Nodes: {len(g.nodes)}  Edges: {len(g.edges)}  Ignored edges: {len(g.dropped_edges)}")
    lines.append(f"Drawn edge crossings: {count_edge_crossings(g)}")
    lines.append("")

    # 2. Engine-specific structure
    if "layers" in meta:
        lines.append("## Layers")
        lines.append("")
        for i, layer in enumerate(meta["layers"]):
            lines.append(f"  {i:3d}: {', '.join(layer)}")
        lines.append("")
        lines.append(f"Layer crossings: {meta['crossings_before']} -> {meta['crossings_after']}")
        back_edges = sorted(meta.get("back_edges", ()))
        if back_edges:
            lines.append("Cycle-closing edges: " + ", ".join(f"{s} -> {t}" for s, t in back_edges))
        lines.append("")

    if "clusters" in meta:
        lines.append("## Clusters")
        lines.append("")
        for name, members in meta["clusters"].items():
            lines.append(f"  {name:20s} {len(members):4d}  {', '.join(members)}")
        lines.append("")
        lines.append(f"Inter-cluster edges pulled: {len(meta['pulled_edges'])}")
        lines.append("")

    # 3. Anchor usage
    lines.append("## Anchors")
    lines.append("")
    if output.anchors:
        pairs = Counter((a.source_side.value, a.target_side.value) for a in output.anchors)
        for (src, dst), count in pairs.most_common():
            pct = count / len(output.anchors) * 100
            bar = "█" * int(pct / 5) + "░" * (20 - int(pct / 5))
            lines.append(f"  {src:>6s} -> {dst:6s} {count:4d}  ({pct:5.1f}%) {bar}")
    else:
        lines.append("  (no edges)")
    lines.append("")

    # 4. Recommendations
    lines.append("## Recommendations")
    lines.append("")
    advice = []
    if meta.get("back_edges"):
        advice.append("⚠️  Diagram contains cycles; layers are only approximately longest-path")
    if g.dropped_edges:
        advice.append("⚠️  Some relationships reference unknown entities and were ignored")
    if meta.get("crossings_after", 0) > 0:
        advice.append("   → Remaining crossings may be inherent to the diagram")
        advice.append("   → Try --layout cluster if entities carry categories")
    lines.extend(advice or ["✓ No issues detected"])

    lines.append("")
    lines.append("=" * 60)

    return "\n".join(lines)
