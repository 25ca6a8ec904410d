"""Command-line interface for Ricknad."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from ricknad.config import MONAD_RESOURCES, MONAD_TESTNET, network_config, settings
from ricknad.errors import RicknadError
from ricknad.log import setup_logging

app = typer.Typer(help="Ricknad: Solidity contract generator for the Monad testnet")
console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
):
    setup_logging(log_level.upper() if log_level else None)


def _open_storage():
    from ricknad.storage import DeployedContractStore, LocalStorage, VerificationStore

    storage = LocalStorage(settings.storage_dir)
    return DeployedContractStore(storage), VerificationStore(storage)


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="Description of the contract"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Solidity source here"),
    abi: Optional[Path] = typer.Option(None, "--abi", help="Write the pseudo-ABI JSON here"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed recorded in the header"),
):
    """Generate a Solidity contract from a prompt."""
    from ricknad.chain.abi import PseudoCompiler
    from ricknad.generator import generate_contract

    contract, _ = generate_contract(prompt, seed=seed)

    console.print(f"[bold blue]{contract.name}[/bold blue] ({contract.type.value})")
    for warning in contract.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")

    if output:
        output.write_text(contract.code)
        console.print(f"Source saved to: {output}")
    else:
        console.print(Syntax(contract.code, "solidity", line_numbers=False))

    if abi:
        try:
            artifact = PseudoCompiler().compile(contract.code, contract.type)
        except RicknadError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        abi.write_text(json.dumps(artifact.abi, indent=2))
        console.print(f"ABI saved to: {abi}")


@app.command()
def classify(
    prompt: str = typer.Argument(..., help="Description of the contract"),
):
    """Show how a prompt is classified."""
    from ricknad.generator import classify as classify_prompt
    from ricknad.generator.types import ordered_features

    result = classify_prompt(prompt)

    table = Table(title="Classification")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Type", result.type.value)
    table.add_row("Name", result.name)
    table.add_row("Symbol", result.parameters.symbol or "")
    table.add_row("Features", ", ".join(f.value for f in ordered_features(result.features)) or "-")
    console.print(table)


@app.command()
def compile(
    file: Path = typer.Argument(..., help="Solidity source file"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the artifact JSON here"),
):
    """Extract a pseudo-ABI from a Solidity file."""
    from ricknad.chain.abi import PseudoCompiler

    if not file.exists():
        console.print(f"[red]File not found: {file}[/red]")
        raise typer.Exit(1)

    try:
        artifact = PseudoCompiler().compile(file.read_text())
    except RicknadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if output:
        artifact.save(output)
        console.print(f"Artifact saved to: {output}")
    else:
        console.print_json(data=artifact.abi)


@app.command()
def chat():
    """Interactive session: describe contracts, then /compile, /deploy or /quit."""
    from ricknad.chat import ChatSession

    session = ChatSession()
    console.print(f"[bold magenta]Ricknad[/bold magenta]: {session.messages[0].content}")

    while True:
        try:
            text = console.input("[bold]> [/bold]")
        except (EOFError, KeyboardInterrupt):
            break

        command = text.strip().lower()
        if command in ("/quit", "/exit"):
            break
        if command == "/compile":
            reply = session.compile()
        elif command == "/deploy":
            reply = asyncio.run(_deploy(session))
        else:
            reply = session.send(text)
            if reply is None:
                continue

        console.print(f"[bold magenta]Ricknad[/bold magenta]: {reply.content}")
        if command not in ("/compile", "/deploy") and reply.contract_data:
            console.print(Syntax(reply.contract_data.code, "solidity"))


async def _deploy(session):
    from ricknad.chain.rpc import RPCClient
    from ricknad.chat import Message, Role

    try:
        rpc = RPCClient()
    except RicknadError as e:
        return Message(role=Role.ASSISTANT, content=f"Deployment failed: {e}")
    if not network_config.monad_private_key:
        return Message(role=Role.ASSISTANT, content="Set MONAD_PRIVATE_KEY to deploy.")

    store, _ = _open_storage()
    try:
        return await session.deploy(rpc, network_config.monad_private_key, store)
    finally:
        await rpc.close()


@app.command()
def contracts(
    command: str = typer.Argument("list", help="Command: list, search, remove, export, import, status"),
    term: Optional[str] = typer.Argument(None, help="Search term or contract address"),
    path: Optional[Path] = typer.Option(None, "--path", "-p", help="File path for export/import"),
    set_status: Optional[str] = typer.Option(None, "--set", help="New verification status for `status`"),
):
    """Manage locally recorded deployments."""
    from ricknad.chain.rpc import format_address
    from ricknad.storage import VerificationStatus

    store, verification = _open_storage()

    if command in ("list", "search"):
        if command == "search" and not term:
            console.print("[red]A search term is required[/red]")
            raise typer.Exit(1)
        items = store.search(term) if command == "search" else store.list()
        table = Table(title="Deployed Contracts")
        table.add_column("Name", style="cyan")
        table.add_column("Address")
        table.add_column("Type", style="green")
        table.add_column("Deployed")
        table.add_column("Verification")
        for item in items:
            table.add_row(
                item.name,
                format_address(item.address),
                item.type,
                item.deployed_at.strftime("%Y-%m-%d %H:%M"),
                verification.get_status(item.address).value,
            )
        console.print(table)

    elif command == "remove":
        if not term:
            console.print("[red]An address is required[/red]")
            raise typer.Exit(1)
        if not store.remove(term):
            console.print(f"[red]No contract at {term}[/red]")
            raise typer.Exit(1)
        console.print(f"Removed {term}")

    elif command in ("export", "import"):
        if not path:
            console.print(f"[red]--path required for {command}[/red]")
            raise typer.Exit(1)
        try:
            if command == "export":
                count = store.export_json(path)
                console.print(f"Exported {count} contracts to {path}")
            else:
                count = store.import_json(path)
                console.print(f"Imported {count} contracts from {path}")
        except RicknadError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    elif command == "status":
        if not term:
            console.print("[red]An address is required[/red]")
            raise typer.Exit(1)
        if set_status:
            try:
                verification.set_status(term, VerificationStatus(set_status))
            except ValueError:
                console.print(f"[red]Unknown status: {set_status}[/red]")
                raise typer.Exit(1)
        console.print(f"{term}: {verification.get_status(term).value}")

    else:
        console.print(f"[red]Unknown command: {command}[/red]")
        console.print("Available: list, search, remove, export, import, status")
        raise typer.Exit(1)


@app.command()
def balance(
    address: str = typer.Argument(..., help="Account address"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc", help="Custom RPC URL"),
):
    """Show an account's MON balance."""
    from ricknad.chain.rpc import RPCClient

    async def _balance():
        rpc = RPCClient(rpc_url)
        try:
            return await rpc.get_balance(address), await rpc.has_enough_balance(address)
        finally:
            await rpc.close()

    try:
        amount, enough = asyncio.run(_balance())
    except (RicknadError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    symbol = MONAD_TESTNET["currency"]["symbol"]
    console.print(f"{address}: [bold]{amount}[/bold] {symbol}")
    if not enough:
        console.print(f"[yellow]Below {settings.min_deploy_balance} {symbol}; get more from the faucet: {MONAD_TESTNET['faucet']}[/yellow]")


@app.command()
def history(
    address: str = typer.Argument(..., help="Account address"),
    limit: int = typer.Option(10, "--limit", "-l", help="Max transactions"),
    blocks: Optional[int] = typer.Option(None, "--blocks", "-b", help="Number of recent blocks to scan"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc", help="Custom RPC URL"),
):
    """List an account's transactions in recent blocks."""
    from ricknad.chain.rpc import RPCClient, format_address

    async def _history():
        rpc = RPCClient(rpc_url)
        try:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Scanning blocks...", total=None)
                txs = await rpc.get_recent_transactions(address, limit=limit, blocks=blocks)
                progress.remove_task(task)
            return txs
        finally:
            await rpc.close()

    try:
        txs = asyncio.run(_history())
    except (RicknadError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not txs:
        console.print("[yellow]No recent transactions[/yellow]")
        return

    table = Table(title="Recent Transactions")
    table.add_column("Hash", style="dim")
    table.add_column("Block", justify="right")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Value", justify="right")
    for tx in txs:
        table.add_row(
            format_address(tx["hash"]),
            str(tx["block_number"]),
            format_address(tx["from"] or ""),
            format_address(tx["to"] or "") or "(create)",
            f"{tx['value']} {MONAD_TESTNET['currency']['symbol']}",
        )
    console.print(table)


@app.command()
def network():
    """Show Monad testnet settings and resources."""
    table = Table(title=MONAD_TESTNET["name"])
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Chain ID", str(MONAD_TESTNET["chain_id"]))
    table.add_row("RPC", network_config.monad_rpc_url)
    table.add_row("Explorer", MONAD_TESTNET["explorer_url"])
    table.add_row("Faucet", MONAD_TESTNET["faucet"])
    table.add_row("Currency", f"{MONAD_TESTNET['currency']['symbol']} ({MONAD_TESTNET['currency']['decimals']} decimals)")
    for name, url in MONAD_RESOURCES.items():
        table.add_row(name.capitalize(), url)
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from ricknad import __version__
    console.print(f"Ricknad version {__version__}")


if __name__ == "__main__":
    app()
