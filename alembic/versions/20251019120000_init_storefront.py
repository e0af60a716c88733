from alembic import op
import sqlalchemy as sa

revision='20251019120000'
down_revision=None

def upgrade():
    op.create_table('users', sa.Column('id', sa.Integer(), primary_key=True), sa.Column('user_name', sa.String(120), nullable=False), sa.Column('email', sa.String(255), nullable=False, unique=True, index=True), sa.Column('password_hash', sa.String(255), nullable=False), sa.Column('role', sa.String(32), nullable=False, server_default='user'), sa.Column('status', sa.String(32), nullable=False, server_default='unverified'), sa.Column('telephone', sa.String(64), nullable=False, server_default=''), sa.Column('address', sa.String(512), nullable=False, server_default=''), sa.Column('refresh_token', sa.String(64), nullable=True), sa.Column('joined_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')), sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')), sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')))
    op.create_table('products', sa.Column('id', sa.Integer(), primary_key=True), sa.Column('name', sa.String(240), nullable=False), sa.Column('description', sa.Text(), nullable=False, server_default=''), sa.Column('price', sa.Numeric(10, 2), nullable=False), sa.Column('category', sa.String(32), nullable=False, index=True), sa.Column('stock', sa.Integer(), nullable=False, server_default='0'), sa.Column('ratings_average', sa.Float(), nullable=False, server_default='0'), sa.Column('ratings_count', sa.Integer(), nullable=False, server_default='0'), sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()'), index=True), sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')), sa.CheckConstraint('price >= 0', name='ck_products_price_nonneg'), sa.CheckConstraint('stock >= 0', name='ck_products_stock_nonneg'))
    op.create_table('product_images', sa.Column('id', sa.Integer(), primary_key=True), sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False), sa.Column('position', sa.Integer(), nullable=False, server_default='0'), sa.Column('url', sa.String(1024), nullable=False))

def downgrade():
    op.drop_table('product_images'); op.drop_table('products'); op.drop_table('users')
