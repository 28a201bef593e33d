from flask_wtf import FlaskForm
from wtforms import SelectField, StringField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, Regexp


class CreateGameForm(FlaskForm):
    name = StringField(
        "Game Name",
        validators=[
            DataRequired(),
            Length(max=100, message="Game name cannot exceed 100 characters"),
        ],
    )
    slug = StringField(
        "Slug (optional)",
        validators=[
            Optional(),
            Length(max=50),
            Regexp(
                r"^[a-z0-9-]+$",
                message="Slug can only contain lowercase letters, numbers, and hyphens",
            ),
        ],
    )
    submit = SubmitField("Add game")


class AddVersionForm(FlaskForm):
    game_id = SelectField("Game", validators=[DataRequired()], coerce=int)
    name = StringField(
        "Version Name", validators=[DataRequired(), Length(max=100)]
    )
    submit = SubmitField("Add version")


class DeleteMatchForm(FlaskForm):
    """Empty form: carries the CSRF token for the delete buttons"""

    submit = SubmitField("Delete")
