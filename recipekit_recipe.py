# recipekit_recipe.py
# Bootstrap recipe for a fresh `rails new` app: gems, generators, auth, admin CMS,
# background jobs and asset pipeline, one commit per step.
# Run from the generated app directory:
#   recipekit run --config path/to/recipekit_recipe.py --root .
from __future__ import annotations

from recipekit.dsl import append, copy, delete, insert_after, recipe_of, say, sh, step, uncomment
from recipekit.step_workflows.rails import (
    APPLICATION_JS,
    IMPORTMAP,
    ROUTES,
    ROUTES_MARKER,
    bundle_install,
    environment,
    gem,
    gem_group,
    generate,
    gitignore,
    importmap_pin,
    initializer,
    js_import,
    lib_file,
    rails_command,
    route,
)

CONTROLLERS_INDEX = "app/javascript/controllers/index.js"

DARTSASS_BUILDS = """\
Rails.application.config.dartsass.builds = {
  "application.scss" => "application.css",
  "site.scss" => "site.css",
  "admin.scss" => "admin.css"
}
"""

INPUT_GROUP_COMPONENT = """\
# custom component requires input group wrapper
module InputGroup
  def prepend(wrapper_options = nil)
    template.content_tag(:span, options[:prepend], class: "input-group-text")
  end

  def append(wrapper_options = nil)
    template.content_tag(:span, options[:append], class: "input-group-text")
  end
end

# Register the component in Simple Form.
SimpleForm.include_component(InputGroup)
"""

SMTP_SETTINGS = """\
config.action_mailer.smtp_settings = {
  :user_name => ENV['POSTMARK_API_KEY'],
  :password => ENV['POSTMARK_API_KEY'],
  :domain => 'example.com',
  :address => 'smtp.postmarkapp.com',
  :port => 587,
  :authentication => :plain,
  :enable_starttls_auto => true
}"""

IMPERSONATION_ROUTES = """\
resources :users, only: [:index] do
  post :impersonate, on: :member
  post :stop_impersonating, on: :collection
end
"""

TOM_SELECT_INIT = """\
import "tom-select"
addEventListener("turbo:load", (event) => {
  document.querySelectorAll('.select-advanced').forEach((el) => {
    let settings = {};
    new TomSelect(el, settings);
  });
})
"""


def recipe():
    return recipe_of(
        step(
            "setup",
            gitignore(".DS_Store"),
            message="Initial commit",
        ),
        step(
            "gems",
            # utility
            gem("dartsass-rails"),
            gem("annotaterb"),
            gem("ransack"),
            gem("name_of_person"),
            gem("github-markup"),
            gem("commonmarker"),
            # seo
            gem("friendly_id"),
            gem("sitemap_generator"),
            gem("meta-tags"),
            gem("breadcrumbs_on_rails"),
            # views
            gem("bootstrap", git="https://github.com/twbs/bootstrap-rubygem", branch="main"),
            gem("simple_form"),
            gem("pagy"),
            gem("bootstrap_views_generator", github="asecondwill/bootstrap_views_generator", branch="main"),
            # authentication / authorization / admin
            gem("devise"),
            gem("devise-bootstrap-views", github="asecondwill/devise-bootstrap-views"),
            gem("pretender"),
            gem("pundit"),
            gem("houston_cms", github="KindlemanHQ/HoustonCMS", tag="v0.1.16"),
            gem("marksmith"),
            gem_group("development", gems=["hirb", "rails-erd", "letter_opener", "dotenv-rails"]),
            message="add gems",
        ),
        step(
            "bundle",
            say("Installing dependencies..."),
            bundle_install(),
            message="bundle install",
            depends_on=["gems"],
        ),
        step(
            "houston",
            say("Installing houston..."),
            generate("houston_cms:install"),
            say("Houston installed!"),
            message="install houston cms",
            depends_on=["bundle"],
        ),
        step(
            "staging",
            environment("host = ENV['IS_STAGING'] ? 'example-staging.herokuapp.com' : 'example.com'", env="production"),
            message="add staging config code",
        ),
        step(
            "email",
            environment("config.action_mailer.default_url_options = { host: 'localhost', port: 3000 }", env="development"),
            environment("config.action_mailer.delivery_method = :letter_opener", env="development"),
            environment("config.action_mailer.perform_deliveries = true", env="development"),
            environment(SMTP_SETTINGS, env="production"),
            message="email setup",
        ),
        step(
            "home-routes",
            route("root to: 'landings#home'"),
            route("get 'dash' => 'dashboards#home', as: :user_root"),
            message="assorted routes",
        ),
        step(
            "importmap",
            rails_command("importmap:install"),
            rails_command("stimulus:install"),
            message="install importmap and stimulus",
            depends_on=["bundle"],
        ),
        step(
            "seo",
            generate("friendly_id"),
            generate("meta_tags:install"),
            rails_command("sitemap:install"),
            message="run generators",
        ),
        step(
            "custom-js",
            append(IMPORTMAP, "pin_all_from 'app/javascript/custom', under: 'custom'\n", skip_if_present=True),
            copy("app/javascript/custom/sprinkles.js"),
            js_import("custom/sprinkles"),
            message="custom js",
            depends_on=["importmap"],
        ),
        step(
            "storage",
            rails_command("active_storage:install"),
            rails_command("action_text:install"),
            environment("config.active_storage.service = :aws", env="production"),
            copy("config/storage.yml", force=True),
            gitignore("/public/storagepublic", "/public/storagepublic/*"),
            message="add storage and text",
        ),
        step(
            "dartsass",
            rails_command("dartsass:install"),
            delete("app/assets/stylesheets/application.css", ignore_missing=True),
            initializer("dartsass.rb", DARTSASS_BUILDS),
            message="add dartsass config",
        ),
        step(
            "bootstrap-js",
            importmap_pin("bootstrap", to="bootstrap.min.js"),
            importmap_pin("popper", to="popper.js"),
            js_import("popper"),
            js_import("bootstrap"),
            message="Bootstrap js",
            depends_on=["importmap"],
        ),
        step(
            "advanced-select",
            importmap_pin("tom-select", to="https://cdn.jsdelivr.net/npm/tom-select@2.4.3/dist/js/tom-select.complete.min.js"),
            append(APPLICATION_JS, TOM_SELECT_INIT, skip_if_present=True),
            message="set up advanced_select",
        ),
        step(
            "simple-form",
            generate("simple_form:install --bootstrap"),
            uncomment(
                "config/initializers/simple_form_bootstrap.rb",
                "Dir[Rails.root.join('lib/components/**/*.rb')].each { |f| require f }",
            ),
            lib_file("components/input_group_component.rb", INPUT_GROUP_COMPONENT),
            message="add simple_form and components",
        ),
        step(
            "devise",
            generate("devise:install"),
            generate("devise", "User", "first_name", "last_name", "site_admin:boolean", "time_zone:string", "debug:boolean"),
            message="setup devise",
        ),
        step(
            "password-visibility",
            sh("bin/importmap pin stimulus-password-visibility"),
            append(CONTROLLERS_INDEX, "import PasswordVisibility from 'stimulus-password-visibility'\n", skip_if_present=True),
            append(CONTROLLERS_INDEX, "application.register('password-visibility', PasswordVisibility)\n", skip_if_present=True),
            message="password visibility",
            depends_on=["importmap"],
        ),
        step(
            "user-settings",
            route("get 'settings', to: 'users#settings'"),
            route("patch 'settings', to: 'users#update_settings'"),
            route("get 'change_password', to: 'users#password'"),
            route("patch 'change_password', to: 'users#update_password'"),
            message="add user settings routes",
        ),
        step(
            "impersonation",
            insert_after(ROUTES, ROUTES_MARKER, IMPERSONATION_ROUTES),
            message="set up impersonation",
        ),
        step(
            "solid-queue",
            generate("solid_queue:install"),
            environment("config.active_job.queue_adapter = :solid_queue", env="development"),
            environment("config.active_job.queue_adapter = :solid_queue", env="production"),
            message="set up solid queue",
        ),
        step(
            "pundit-annotate",
            generate("pundit:install"),
            generate("annotate_rb:install"),
            message="install pundit and annotate",
        ),
        step(
            "readme",
            copy("README.md", force=True),
            message="copy README",
        ),
        step(
            "app-files",
            copy("app", force=True),
            copy("lib/bootstrap_five_breadcrumbs.rb"),
            copy("locales/en.rb"),
            copy("config/initializers/time_formats.rb"),
            copy("config/initializers/houston_cms.rb", force=True),
            copy(".env.example", ".env"),
            message="copy app dir & other files",
        ),
    )
