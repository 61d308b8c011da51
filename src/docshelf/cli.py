"""CLI entry point for docshelf."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import DEFAULT_CONFIG, load_config
from .errors import DocshelfError

console = Console()


@click.group()
@click.option("--config", "-c", "config_path", default=None, help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Log algorithm progress")
@click.pass_context
def cli(ctx, config_path, verbose):
    """docshelf - Organize documents onto shelves by embedding similarity."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


def _get_config(ctx) -> dict:
    return load_config(ctx.obj.get("config_path"))


def _load_documents(path: str):
    from .sources import FileEmbeddingSource
    return FileEmbeddingSource(path).load()


def _embedded(docs):
    from .organization.pipeline import usable_documents
    usable = usable_documents(docs)
    skipped = len(docs) - len(usable)
    if skipped:
        console.print(f"  [dim]({skipped} document(s) without embeddings skipped)[/]")
    return usable


@cli.command()
@click.option("--path", default=".", help="Directory to write config.yaml into")
def init(path):
    """Write a default config.yaml."""
    import yaml

    config_file = Path(path).expanduser().resolve() / "config.yaml"
    if config_file.exists():
        console.print(f"[yellow]Config already exists: {config_file}[/]")
        return
    config_file.parent.mkdir(parents=True, exist_ok=True)
    header = (
        "# Override the seed or threshold with DOCSHELF_SEED / DOCSHELF_THRESHOLD\n"
        "# organization.method: kmeans or communities\n\n"
    )
    config_file.write_text(header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False))
    console.print(f"[bold green]✓ Created config: {config_file}[/]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--n", "-n", default=10, help="Number of edges to show")
@click.pass_context
def graph(ctx, file, n):
    """Build the similarity graph and show the strongest edges."""
    from .clustering.graph import build_similarity_graph, strongest_edges

    try:
        config = _get_config(ctx)
        usable = _embedded(_load_documents(file))
        g = build_similarity_graph(
            [(doc.id, vector) for doc, vector in usable],
            threshold=config["graph"]["similarity_threshold"],
        )
    except DocshelfError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    console.print(f"[green]✓ {len(g.nodes)} node(s), {len(g.edges)} edge(s)[/]")
    for edge in strongest_edges(g, n):
        console.print(f"  {edge.source} ↔ {edge.target} (score: {edge.weight:.3f})")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def communities(ctx, file):
    """Detect communities of related documents."""
    from .clustering.communities import detect_communities, group_communities
    from .clustering.graph import build_similarity_graph

    try:
        config = _get_config(ctx)
        usable = _embedded(_load_documents(file))
        g = build_similarity_graph(
            [(doc.id, vector) for doc, vector in usable],
            threshold=config["graph"]["similarity_threshold"],
        )
        result = detect_communities(g, max_iterations=config["communities"]["max_iterations"])
    except DocshelfError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    if not result.partition:
        console.print("[yellow]No documents with embeddings.[/]")
        return
    if not result.converged:
        console.print(f"[yellow]Stopped after {result.iterations} pass(es) without converging[/]")

    names = {doc.id: doc.name for doc, _ in usable}
    clusters = group_communities(result.partition, names)
    console.print(f"[green]✓ Found {len(clusters)} cluster(s)[/]")
    for c in clusters:
        console.print(f"  [bold]{c.label}[/]: {len(c.document_ids)} documents")
        for name in c.document_names:
            console.print(f"    → {name}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--k", "-k", "k", required=True, type=int, help="Number of clusters")
@click.option("--seed", default=None, type=int, help="Random seed (default from config)")
@click.pass_context
def kmeans(ctx, file, k, seed):
    """Run k-means on document embeddings."""
    from .clustering.kmeans import assignments_to_clusters, run_kmeans

    try:
        config = _get_config(ctx)
        usable = _embedded(_load_documents(file))
        result = run_kmeans(
            [vector for _, vector in usable],
            k,
            max_iterations=config["kmeans"]["max_iterations"],
            seed=config["kmeans"]["seed"] if seed is None else seed,
        )
    except DocshelfError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    status = "converged" if result.converged else "hit iteration cap"
    console.print(f"[green]✓ {k} cluster(s) after {result.iterations} iteration(s), {status}[/]")
    for i, members in enumerate(assignments_to_clusters(result.assignments, k)):
        names = ", ".join(usable[m][0].name for m in members)
        console.print(f"  Cluster {i + 1}: {len(members)} documents [dim]{names}[/]")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--method", type=click.Choice(["kmeans", "communities"]), default=None,
              help="Clustering method (default from config)")
@click.option("--all", "show_all", is_flag=True, help="Show unchanged documents too")
@click.option("--output", "-o", default=None, help="Write suggestions to a JSON file")
@click.pass_context
def organize(ctx, file, method, show_all, output):
    """Suggest shelf/folder locations for documents."""
    from rich.progress import Progress
    from .organization.pipeline import organize_documents
    from .organization.planner import changed_only

    try:
        config = _get_config(ctx)
        docs = _load_documents(file)
        with Progress(console=console, transient=True) as bar:
            task = bar.add_task("Organizing...", total=1.0)

            def on_progress(stage: str, fraction: float) -> None:
                bar.update(task, completed=fraction, description=stage.capitalize())

            suggestions = organize_documents(docs, config, method=method, progress=on_progress)
    except DocshelfError as e:
        console.print(f"[red]{e}[/]")
        raise SystemExit(1)

    shown = suggestions if show_all else changed_only(suggestions)
    if not shown:
        console.print("[yellow]No location changes suggested.[/]")
    else:
        table = Table(title="Suggested Locations")
        table.add_column("Document", style="cyan")
        table.add_column("Current", style="dim")
        table.add_column("Suggested", style="green")
        for s in shown:
            table.add_row(s.name, str(s.current) if s.current else "Unsorted", str(s.suggested))
        console.print(table)

    if output:
        Path(output).write_text(json.dumps([s.to_dict() for s in shown], indent=2))
        console.print(f"[green]✓ Wrote {len(shown)} suggestion(s) to {output}[/]")


if __name__ == "__main__":
    cli()
