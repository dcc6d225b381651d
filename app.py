from flask import Flask, render_template, request, send_file, abort, jsonify
from pydantic import ValidationError
import click
import io, os
from datetime import datetime

from assembler import GenerationError, GenerationRequest, assemble, protect
from branding import BrandingConfig, style_for
from imaging import DEFAULT_JPEG_QUALITY, DEFAULT_RASTER_WIDTH, is_image_upload

app = Flask(__name__, template_folder="templates")

app.config.from_mapping(
    MAX_CONTENT_LENGTH=64 * 1024 * 1024,  # whole upload, images + logo
    MAX_IMAGES=60,
    RASTER_WIDTH=DEFAULT_RASTER_WIDTH,
    JPEG_QUALITY=DEFAULT_JPEG_QUALITY,
    DEFAULT_STYLE="branded",
    BACKDROP_IMAGE=None,
    # overrides of the default branding, e.g. PROPOSAL_BRANDING__company_name
    BRANDING={},
)
app.config.from_prefixed_env("PROPOSAL")

BRANDING_FIELDS = ("company_name", "tagline", "website", "instagram", "accent_color", "background_color")


def default_branding():
    return BrandingConfig(**app.config["BRANDING"])


def branding_from_form(form):
    """Branding typed into the form; blank fields keep the configured defaults."""
    values = default_branding().model_dump()
    for key in BRANDING_FIELDS:
        given = form.get(key, "").strip()
        if given:
            values[key] = given
    return BrandingConfig(**values)


def ordered_uploads(files, order_names=()):
    """Uploaded images in the order the page asked for.

    order_names lists the kept file names, one form value each. Names that
    were not uploaded are ignored. Once any name is given, uploads missing
    from the list were removed on the page and are skipped.
    """
    files = [f for f in files if f.filename and is_image_upload(f.filename, f.mimetype)]
    order_names = [n for n in order_names if n]
    if not order_names:
        return files

    by_name = {}
    for f in files:
        by_name.setdefault(f.filename, []).append(f)
    ordered = []
    for name in order_names:
        if by_name.get(name):
            ordered.append(by_name[name].pop(0))
    return ordered


def optional_logo(upload):
    if upload is None or not upload.filename:
        return None
    if not is_image_upload(upload.filename, upload.mimetype):
        return None
    return upload


def build_pdf(proposal, password=None):
    pdf = assemble(proposal, on_progress=lambda pct: app.logger.debug("%s: %d%%", proposal.filename, pct))
    if password:
        pdf = protect(pdf, password)
    return pdf


@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "POST":
        client_name = request.form.get("client_name", "").strip()
        room_name = request.form.get("room_name", "").strip()
        if not client_name or not room_name:
            return abort(400, "Client name and room name are required.")

        images = ordered_uploads(request.files.getlist("images"), request.form.getlist("order"))
        if not images:
            return abort(400, "No images uploaded.")
        if len(images) > app.config["MAX_IMAGES"]:
            return abort(400, f"Too many images (max {app.config['MAX_IMAGES']}).")

        try:
            branding = branding_from_form(request.form)
            style = style_for(
                request.form.get("style") or app.config["DEFAULT_STYLE"],
                app.config["BACKDROP_IMAGE"],
            )
            proposal = GenerationRequest(
                client_name=client_name,
                room_name=room_name,
                images=images,
                branding=branding,
                logo=optional_logo(request.files.get("logo")),
                style=style,
                raster_width=app.config["RASTER_WIDTH"],
                jpeg_quality=app.config["JPEG_QUALITY"],
            )
        except (ValidationError, ValueError) as e:
            app.logger.info("Rejected proposal form: %s", e)
            return abort(400, "Invalid proposal details.")

        try:
            pdf = build_pdf(proposal, request.form.get("pdf_password", "").strip())
        except GenerationError:
            return abort(422, "Failed to generate PDF. Please try again.")

        return send_file(io.BytesIO(pdf), as_attachment=True, download_name=proposal.filename,
                         mimetype="application/pdf")

    # GET
    return render_template(
        "index.html",
        branding=default_branding(),
        max_images=app.config["MAX_IMAGES"],
        backdrop_available=bool(app.config["BACKDROP_IMAGE"]),
    )


@app.route("/health")
def health_check():
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()})


@app.cli.command("generate")
@click.argument("client_name")
@click.argument("room_name")
@click.argument("images", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--logo", type=click.Path(exists=True, dir_okay=False), help="Logo image for the pages.")
@click.option("--style", type=click.Choice(["branded", "backdrop"]), default=None)
@click.option("--output", "output_dir", type=click.Path(file_okay=False), default=".", show_default=True)
@click.option("--password", default=None, help="Encrypt the PDF with this password.")
def generate_command(client_name, room_name, images, logo, style, output_dir, password):
    """Build a proposal PDF from image files."""
    try:
        proposal = GenerationRequest(
            client_name=client_name,
            room_name=room_name,
            images=images,
            branding=default_branding(),
            logo=logo,
            style=style_for(style or app.config["DEFAULT_STYLE"], app.config["BACKDROP_IMAGE"]),
            raster_width=app.config["RASTER_WIDTH"],
            jpeg_quality=app.config["JPEG_QUALITY"],
        )
    except (ValidationError, ValueError) as e:
        raise click.UsageError(str(e))

    try:
        pdf = assemble(proposal, on_progress=lambda pct: click.echo(f"{pct}%"))
    except GenerationError as e:
        raise click.ClickException(f"{e} (image {e.image_index + 1}: {images[e.image_index]})")
    if password:
        pdf = protect(pdf, password)

    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, proposal.filename)
    with open(path, "wb") as fh:
        fh.write(pdf)
    click.echo(f"Saved {path}")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=True)
